"""Prompt templates for the assistant operations.

Contains prompt templates for:
- Problem extraction from screenshots
- Solution generation
- Debugging with new screenshots
- Free-text image and audio descriptions
"""

import json
from typing import Any

SYSTEM_PROMPT = """You are Wingman AI, a helpful, proactive assistant for any kind of problem or situation (not just coding). For any user input, analyze the situation, provide a clear problem statement, relevant context, and suggest several possible responses or actions the user could take next. Always explain your reasoning. Present your suggestions as a list of options or next steps."""

JSON_ONLY_NOTICE = (
    "Important: Return ONLY the JSON object, without any markdown formatting or code blocks."
)

EXTRACTION_SCHEMA = """{
  "problem_statement": "A clear statement of the problem or situation depicted in the images.",
  "context": "Relevant background or context from the images.",
  "suggested_responses": ["First possible answer or action", "Second possible answer or action", "..."],
  "reasoning": "Explanation of why these suggestions are appropriate."
}"""

SOLUTION_SCHEMA = """{
  "solution": {
    "code": "The code or main answer here.",
    "problem_statement": "Restate the problem or situation.",
    "context": "Relevant background/context.",
    "suggested_responses": ["First possible answer or action", "Second possible answer or action", "..."],
    "reasoning": "Explanation of why these suggestions are appropriate."
  }
}"""

EXTRACTION_PROMPT = f"""{SYSTEM_PROMPT}

You are a wingman. Please analyze these images and extract the following information in JSON format:
{EXTRACTION_SCHEMA}
{JSON_ONLY_NOTICE}"""

SOLUTION_PROMPT = """{system_prompt}

Given this problem or situation:
{problem_info}

Please provide your response in the following JSON format:
{schema}
{notice}"""

DEBUG_PROMPT = """{system_prompt}

You are a wingman. Given:
1. The original problem or situation: {problem_info}
2. The current response or approach: {current_answer}
3. The debug information in the provided images

Please analyze the debug information and provide feedback in this JSON format:
{schema}
{notice}"""

IMAGE_DESCRIPTION_PROMPT = f"""{SYSTEM_PROMPT}

Describe the content of this image in a short, concise answer. In addition to your main answer, suggest several possible actions or responses the user could take next based on the image. Do not return a structured JSON object, just answer naturally as you would to a user. Be concise and brief."""

AUDIO_DESCRIPTION_PROMPT = f"""{SYSTEM_PROMPT}

Describe this audio clip in a short, concise answer. In addition to your main answer, suggest several possible actions or responses the user could take next based on the audio. Do not return a structured JSON object, just answer naturally as you would to a user and be concise."""

HEALTH_CHECK_PROMPT = "Hello"


def _dump(problem_info: Any) -> str:
    return json.dumps(problem_info, indent=2, ensure_ascii=False)


def build_solution_prompt(problem_info: Any) -> str:
    return SOLUTION_PROMPT.format(
        system_prompt=SYSTEM_PROMPT,
        problem_info=_dump(problem_info),
        schema=SOLUTION_SCHEMA,
        notice=JSON_ONLY_NOTICE,
    )


def build_debug_prompt(problem_info: Any, current_answer: str) -> str:
    return DEBUG_PROMPT.format(
        system_prompt=SYSTEM_PROMPT,
        problem_info=_dump(problem_info),
        current_answer=current_answer,
        schema=SOLUTION_SCHEMA,
        notice=JSON_ONLY_NOTICE,
    )
