from __future__ import annotations

INTRO_MESSAGE = (
    "We will collect key information about your frontend experience. "
    "Answer in Arabic or English. I will ask a few focused questions."
)

INTERVIEW_QUESTIONS: tuple[str, ...] = (
    "Describe your most recent frontend role. You can write in Arabic or English.",
    "Which frontend technologies do you use regularly? "
    "(e.g., React, Vue, Angular, TypeScript, Tailwind CSS)",
    "Describe one project you are proud of. What was the impact on performance, UX, or business?",
    "What is your education background? (degrees, universities, dates, location).",
)

CLOSING_MESSAGE = (
    "Thank you. You can continue refining your experience, "
    "or paste a job link to tailor your resume."
)


def next_prompt(answered: int) -> str:
    """The assistant message that follows ``answered`` user answers."""
    if answered < len(INTERVIEW_QUESTIONS):
        return INTERVIEW_QUESTIONS[answered]
    return CLOSING_MESSAGE
