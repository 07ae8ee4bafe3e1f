"""Prompt templates shared by every provider."""

SUMMARY_PROMPT = """You generate a faithful summary of the input text as an HTML fragment styled with TailwindCSS classes.
Keep every key point, shorten only redundant content, and do not invent facts.

Requirements:
1. Detect the language of the text and state it first: <p class="text-sm text-gray-500">Language: ...</p>
2. Use <h1> for the main title, <h2> for sections, <p> or <li> for points.
3. No raw newline characters; structure with HTML elements only.
4. Output HTML only, with no text outside it.

Text to summarize:
{text}
"""

QUIZ_PROMPT = """You are a quiz generator. Create exactly {num_questions} multiple-choice questions based strictly on the provided text.

Rules:
- Difficulty: {difficulty}.
- Each question has 4 unique options labeled A, B, C, D.
- Exactly one correct answer, given as "A", "B", "C" or "D".
- Respond with JSON only. No markdown, no commentary.

JSON schema:
{{
  "questions": [
    {{
      "question": "string",
      "options": {{ "A": "...", "B": "...", "C": "...", "D": "..." }},
      "answer": "A|B|C|D"
    }}
  ]
}}

Source text:
{text}
"""


def summary_prompt(text: str) -> str:
    return SUMMARY_PROMPT.format(text=text)


def quiz_prompt(text: str, num_questions: int, difficulty: str) -> str:
    return QUIZ_PROMPT.format(text=text, num_questions=num_questions, difficulty=difficulty)
