"""
User-facing chat texts.
"""

from phonebot.shared.result import Err, ErrorKind

ERROR_USER_COUNT_IN_CHAT = (
    "A call can only be started from a chat with exactly two participants."
)
ERROR_GET_TOKEN = "Sorry, I could not authenticate with the directory. Please try again later."
ERROR_USER_PHONE_MISSING = "{name} has no phone number in the directory."
ERROR_UNHANDLED = "Sorry, something went wrong: {detail}"


def render_error(err: Err) -> str:
    """Turn a failed pipeline result into the chat message sent to the user."""
    match err.kind:
        case ErrorKind.WRONG_PARTICIPANT_COUNT:
            return ERROR_USER_COUNT_IN_CHAT
        case ErrorKind.AUTHENTICATION_FAILURE:
            return ERROR_GET_TOKEN
        case ErrorKind.PHONE_NOT_FOUND:
            return ERROR_USER_PHONE_MISSING.format(name=err.detail)
        case ErrorKind.DISPATCH_FAILURE:
            # Bridge response body, verbatim.
            return err.detail
        case _:
            return ERROR_UNHANDLED.format(detail=err.detail)
