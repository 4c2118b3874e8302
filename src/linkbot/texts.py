"""User-facing reply texts and command tokens."""

START_COMMAND = "/start"
REPLACE_COMMAND = "/replace"

START_TEXT = "Please send the message to replace links in"
READY_TEXT = (
    f"Now send new link in format {REPLACE_COMMAND} <link> "
    f"or send {START_COMMAND} to reset"
)
BATCH_MISMATCH_TEXT = (
    f"Send new link in format {REPLACE_COMMAND} <link> "
    f"or send {START_COMMAND} to reset"
)
MALFORMED_LINK_TEXT = "Link is incorrect"
NO_PENDING_SUBMISSION_TEXT = "You did not send the message to replace links in"
NO_ENTITIES_TEXT = f"No links found, send {START_COMMAND}"
SEND_FAILED_TEXT = "Failed to send the edited message"
NOT_AUTHORIZED_TEXT = "You are not authorized to use this bot."
