# common/utils.py
"""
Utility functions shared across different modules to prevent circular imports.
"""

from collections import defaultdict

# User facing notice text per outbound operation.
# "success" is used for a positive reply, "failed" when the service answered
# with a failure, "error" when it could not be reached at all.
SUBMISSION_MESSAGES = {
    "save_connection": {
        "pending": "Attempting to connect and save database connection...",
        "success": "Connection saved successfully: {message}",
        "failed": "Failed to save connection: {detail}",
        "error": "Error saving database connection: {detail}",
    },
    "apply_selections": {
        "pending": "Saving analysis modes and checks...",
        "success": "Success: {message}",
        "failed": "Failed to save selections: {detail}",
        "error": "Error saving analysis modes: {detail}",
    },
    "enable_llm": {
        "pending": "Attempting to enable LLM and generate response...",
        "success": "LLM Generation Success! Response: {response}",
        "failed": "LLM Generation Failed: {detail}",
        "error": "Error enabling LLM: {detail}",
    },
    "save_rag_credentials": {
        "pending": "Saving RAG Credentials...",
        "success": "RAG Credentials saved successfully: {message}",
        "failed": "Failed to save RAG Credentials: {detail}",
        "error": "Error saving RAG Credentials: {detail}",
    },
    "upload_knowledge": {
        "pending": "Uploading file and processing knowledge base...",
        "success": "Upload successful! Document ID: {document_id}, Filename: {filename}, Message: {message}",
        "failed": "Upload failed: {detail}",
        "error": "Error uploading file: {detail}",
    },
    "execute_prompt": {
        "pending": "Sending prompt generation request...",
        "success": "Prompt generation successful! Response: {response}",
        "failed": "Prompt generation failed: {detail}",
        "error": "Error generating prompt: {detail}",
    },
}

GENERIC_MESSAGES = {
    "pending": "Sending request...",
    "success": "Request completed: {message}",
    "failed": "Request failed: {detail}",
    "error": "Request error: {detail}",
}


def get_submission_message(operation, outcome, **values):
    """
    Build the notice text for an operation outcome.

    Args:
        operation (str): Outbound operation name (save_connection, enable_llm, ...)
        outcome (str): One of pending, success, failed, error
        **values: Placeholder values; missing placeholders render as "Unknown error",
            or as nothing for a success message

    Returns:
        str: The formatted message
    """
    templates = SUBMISSION_MESSAGES.get(operation, GENERIC_MESSAGES)
    template = templates.get(outcome, GENERIC_MESSAGES[outcome])
    missing = "" if outcome == "success" else "Unknown error"
    filled = defaultdict(lambda: missing)
    filled.update({k: v for k, v in values.items() if v not in (None, "")})
    message = template.format_map(filled)
    if outcome == "success":
        # drop the dangling label of an absent trailing value
        message = message.rstrip(": ")
    return message


def preview_text(text, limit=100):
    """Shorten a generated response for display in the notice box."""
    if text is None:
        return ""
    text = str(text)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
