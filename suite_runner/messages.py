"""Display strings for report messages, looked up by key."""

MESSAGES: dict[str, str] = {
    "runStarting": "Run starting. Expected test count is: {0}",
    "runCompleted": "Run completed in {0} milliseconds.",
    "runStopped": "Run stopped.",
    "runAborted": "Run aborted: {0}",
    "suiteExecutionStarting": "The execute method of a nested suite is about to be invoked.",
    "suiteCompletedNormally": "The execute method of a nested suite returned normally.",
    "executeException": "An exception or error caused a run to abort.",
    "executeStopping": "The execute method of a suite is returning because a stop was requested.",
    "testIgnored": "Test was ignored.",
    "testPending": "Test is pending.",
    "cannotLoadSuite": "Suite could not be found: {0}",
    "cannotInstantiateSuite": "Suite could not be instantiated: {0}",
    "cannotFindTest": "Test could not be found: {0}",
    "securityWhenRerunning": "Access was denied while rerunning: {0}",
    "cannotLoadDependency": "A dependency of the suite could not be loaded: {0}",
    "bigProblems": "An unexpected {0} aborted the run: {1}",
    "reporterThrew": "Reporter {0} threw {1}: {2} while handling {3}",
    "itShould": "it should {0}",
    "prefixShouldSuffix": "{0} should {1}",
    "prefixSuffix": "{0} {1}",
}


def message(key: str, *args: object) -> str:
    """Produce the display string for a message key.

    Unknown keys are returned unchanged so a missing entry never breaks a run.
    """
    template = MESSAGES.get(key)
    if template is None:
        return key
    return template.format(*args)
