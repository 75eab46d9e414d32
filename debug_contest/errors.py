"""
Contest error taxonomy

Routers translate these into HTTP responses; nothing here is fatal to the
process.
"""


class ContestError(Exception):
    """Base class for all contest errors"""


class ValidationError(ContestError, ValueError):
    """Missing or malformed input, rejected before any store call"""


class SessionNotFoundError(ContestError):
    """Session token unknown or already cleared"""


class NoActiveQuestionError(ContestError):
    """No question is configured, so nothing can be served or judged"""


class ContestCompletedError(NoActiveQuestionError):
    """Team already solved the last question (terminal state)"""


class QuestionMismatchError(ContestError):
    """Submission targets a question other than the team's active one"""

    def __init__(self, submitted_qid, active_qid):
        self.submitted_qid = submitted_qid
        self.active_qid = active_qid
        super().__init__(
            f"Question {submitted_qid} is not the active question (expected {active_qid})"
        )


class ProgressConflictError(ContestError):
    """Team pointer moved between read and update; nothing was applied"""


class StoreError(ContestError):
    """Record store unavailable or rejected the operation"""
