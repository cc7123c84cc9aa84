from __future__ import annotations


def before_scenario(context, scenario) -> None:
    """
    Behave hook executed before each scenario.

    :param context: Behave context object.
    :type context: object
    :param scenario: Behave scenario.
    :type scenario: object
    :return: None.
    :rtype: None
    """
    context.documents = []
    context.result = None
    context.last_error = None
    context.round_reports = []
