import logging
import re

from pythonjsonlogger.json import JsonFormatter

SECRET_PATTERN = re.compile(r'(Bearer|Authorization:|OPENAI_API_KEY:|passkey=|credential=)\s*[\'"]?[A-Za-z0-9_\-@.]+')
OPENAI_KEY_PATTERN = re.compile(r'sk-[A-Za-z0-9_\-]{8,}')

# loguru levels without a stdlib twin fold into the nearest one
LEVEL_NAMES = {
    "WARNING": "WARN",
    "CRITICAL": "FATAL",
    "SUCCESS": "INFO",
    "TRACE": "DEBUG",
}


def obfuscate_message(message: str):
    """Obfuscate sensitive information."""
    result = SECRET_PATTERN.sub(r"\1 ***SECRET_OBFUSCATED***", message)
    result = OPENAI_KEY_PATTERN.sub("***API_KEY_OBFUSCATED***", result)
    return result


class TokenExplorerJsonFormatter(JsonFormatter):
    """One JSON object per record, secrets masked, request id lifted from loguru's extra."""

    def add_fields(self, log_record, record, message_dict):
        record.message = obfuscate_message(record.getMessage())
        super().add_fields(log_record, record, message_dict)

        log_record['logger'] = record.name
        log_record['level'] = LEVEL_NAMES.get(record.levelname, record.levelname)

        request_id = (getattr(record, "extra", None) or {}).get("request_id")
        if request_id and request_id != "-":
            log_record['request_id'] = request_id


jsonLogHandler = logging.StreamHandler()
jsonLogHandler.setFormatter(TokenExplorerJsonFormatter('%(message)s %(level)s %(logger)s'))
