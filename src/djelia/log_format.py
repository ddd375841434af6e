import logging

RESET = "\033[0m"
DIM = "\033[2m"
BOLD = "\033[1m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
CYAN = "\033[36m"

LEVEL_COLORS = {
    logging.DEBUG: DIM,
    logging.INFO: GREEN,
    logging.WARNING: YELLOW,
    logging.ERROR: RED,
    logging.CRITICAL: RED + BOLD,
}

# Message prefix -> highlight, checked in order.
HIGHLIGHTS = (
    ("Retrying", BOLD + YELLOW),
    ("Request:", CYAN),
    ("Skipping malformed line", YELLOW),
)


class ColoredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno, "")
        time = self.formatTime(record, self.datefmt)
        name = record.name.split(".")[-1]
        msg = record.getMessage()

        highlight = next((style for prefix, style in HIGHLIGHTS if msg.startswith(prefix)), None)
        if highlight is None and record.levelno == logging.DEBUG:
            highlight = DIM
        elif highlight is None and record.levelno >= logging.WARNING:
            highlight = color
        if highlight:
            msg = f"{highlight}{msg}{RESET}"

        return f"{DIM}{time}{RESET} {color}{record.levelname:<5}{RESET} {DIM}{name:<16}{RESET} {msg}"
