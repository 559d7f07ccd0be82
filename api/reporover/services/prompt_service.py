"""
Service for generating LLM prompts.
"""
from typing import Optional

QUIZ_QUESTION_COUNT = 3

QUIZ_FORMAT_INSTRUCTIONS = """Return ONLY a valid JSON array of questions in this exact format:
[
  {
    "question": "Question text here?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": 0,
    "explanation": "Why this answer is correct"
  }
]"""


def generate_explain_prompt(code: str, language: Optional[str] = None, question: Optional[str] = None) -> str:
    """
    Build the tutoring prompt for a code explanation.

    Args:
        code: Source code to explain
        language: Programming language, if known
        question: Optional learner question about the code

    Returns:
        The prompt string
    """
    fence = f"```{language or ''}\n{code}\n```"
    if question:
        return f"""You are an expert code tutor. A student is learning {language or 'programming'} and has the following question about this code:

Code:
{fence}

Question: {question}

Provide a clear, educational explanation that helps them understand the code and answers their question. Break down complex concepts into simple terms."""

    return f"""You are an expert code tutor. Explain the following {language or ''} code in a clear, educational way. Break down what each part does, explain key concepts, and highlight any best practices or potential improvements:

{fence}"""


def generate_quiz_prompt(
    code: Optional[str] = None,
    topic: Optional[str] = None,
    language: Optional[str] = None,
    difficulty: str = "medium"
) -> str:
    """
    Build the prompt for a multiple-choice quiz about code or a topic.

    Code takes precedence over topic when both are given.
    """
    if code:
        return f"""Generate {QUIZ_QUESTION_COUNT} multiple-choice quiz questions about the following {language or ''} code. Make the questions {difficulty} difficulty level.

Code:
```{language or ''}
{code}
```

{QUIZ_FORMAT_INSTRUCTIONS}

Make sure:
- Questions test understanding of the code
- All 4 options are plausible
- correctAnswer is the index (0-3) of the correct option
- Explanations are clear and educational"""

    return f"""Generate {QUIZ_QUESTION_COUNT} multiple-choice quiz questions about {topic}. Make the questions {difficulty} difficulty level.

{QUIZ_FORMAT_INSTRUCTIONS}

Make sure:
- Questions cover key concepts
- All 4 options are plausible
- correctAnswer is the index (0-3) of the correct option
- Explanations are clear and educational"""
