# feedback.py
from dataclasses import dataclass
from typing import Optional
import logging
import urllib.parse

logger = logging.getLogger(__name__)

FEEDBACK_SUBJECT = "3D Print Debugger Feedback"
NOT_PROVIDED = "Not provided"
RATINGS = (1, 2, 3, 4, 5)

@dataclass
class Feedback:
    rating: Optional[int] = None
    text: str = ""
    email: str = ""

    def __post_init__(self):
        if self.rating is not None and self.rating not in RATINGS:
            raise ValueError(f"Rating must be one of {RATINGS}, got {self.rating}")

    def is_empty(self) -> bool:
        return not self.text.strip() and self.rating is None

    def to_text(self) -> str:
        return (
            f"Rating: {self.rating or NOT_PROVIDED}\n"
            f"Feedback: {self.text.strip() or NOT_PROVIDED}\n"
            f"User Email: {self.email.strip() or NOT_PROVIDED}"
        )

    def mailto_link(self, contact_email: str) -> str:
        subject = urllib.parse.quote(FEEDBACK_SUBJECT)
        body = urllib.parse.quote(self.to_text())
        logger.info("Feedback prepared for email client")
        return f"mailto:{contact_email}?subject={subject}&body={body}"
