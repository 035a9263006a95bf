"""
Career Tools Scoring

Rule-based heuristics behind the career tools:
1. Resume keyword scoring   - action verbs + quantified impact
2. Mock-interview scoring   - STAR structure + answer length
3. Confidence pulse         - engagement metric from practice and applications

Everything here is a pure function of its input: no database, no I/O.
Route handlers persist whatever needs persisting.

All scores are integers in [0, 100].
"""

import math
import re
from typing import Dict, List, Optional

from jobportal.core.exceptions import ValidationError


# ============================================================
# RESUME SCORING
# ============================================================

MIN_RESUME_LENGTH = 20
DETAILED_RESUME_LENGTH = 150

ACTION_KEYWORDS = [
    "leadership", "managed", "developed", "implemented", "achieved",
    "increased", "reduced", "improved", "collaborated", "designed",
    "led", "created", "launched", "optimized", "scaled",
]

# 35%, $5000, "10,000 users", "3 revenue" ...
METRIC_PATTERN = re.compile(
    r"\d+%|\$\d+|\d[\d,]*\s*(users|customers|revenue|growth|reduction|increase)",
    re.IGNORECASE,
)

GENERIC_RESUME_TIPS = [
    "Strong foundation! Consider adding technical skills or certifications relevant to your target role",
    "Include links to portfolio, GitHub, or LinkedIn for additional context",
    "Tailor each bullet point to match keywords from the job description",
]


def analyze_resume(resume_text: Optional[str]) -> Dict:
    """
    Score resume text against the action-verb table and metric pattern.

    Returns:
        {"score": int, "tips": [str], "foundKeywords": [str] (max 5), "hasMetrics": bool}

    Raises:
        ValidationError if the trimmed text is shorter than 20 characters.
    """
    if not resume_text or len(resume_text.strip()) < MIN_RESUME_LENGTH:
        raise ValidationError(
            f"Please provide resume text (minimum {MIN_RESUME_LENGTH} characters)",
            errors=[{"field": "resumeText", "message": f"Minimum {MIN_RESUME_LENGTH} characters"}],
        )

    has_metrics = METRIC_PATTERN.search(resume_text) is not None

    lower_text = resume_text.lower()
    found_keywords = [kw for kw in ACTION_KEYWORDS if kw in lower_text]
    missing_keywords = [kw for kw in ACTION_KEYWORDS if kw not in lower_text]

    tips: List[str] = []
    if not has_metrics:
        tips.append('Add quantifiable metrics (e.g., "increased sales by 35%" or "managed team of 8 engineers")')
    if len(found_keywords) < 3:
        tips.append(f"Include action verbs like: {', '.join(missing_keywords[:5])}")
    if len(resume_text) < DETAILED_RESUME_LENGTH:
        tips.append("Expand your experience with specific examples and results achieved")
    if "project" not in lower_text and "initiative" not in lower_text:
        tips.append("Highlight specific projects or initiatives you led or contributed to")
    if not tips:
        tips = list(GENERIC_RESUME_TIPS)

    score = min(
        100,
        len(found_keywords) * 8
        + (25 if has_metrics else 0)
        + (15 if len(resume_text) > DETAILED_RESUME_LENGTH else 0)
        + 20,
    )

    return {
        "score": score,
        "tips": tips,
        "foundKeywords": found_keywords[:5],
        "hasMetrics": has_metrics,
    }


# ============================================================
# INTERVIEW SCORING (STAR)
# ============================================================

STAR_PATTERNS = {
    "situation": re.compile(r"situation|context|background", re.IGNORECASE),
    "task": re.compile(r"task|goal|objective|challenge", re.IGNORECASE),
    "action": re.compile(r"action|did|implemented|executed|performed", re.IGNORECASE),
    "result": re.compile(r"result|outcome|impact|achieved|accomplished", re.IGNORECASE),
}

STAR_FEEDBACK = {
    "situation": "Add context: Describe the situation or background",
    "task": "Clarify the task: What was your goal or challenge?",
    "action": "Detail your action: What specific steps did you take?",
    "result": "Share the result: What was the outcome or impact?",
}

SHORT_ANSWER_WORDS = 50

GENERIC_INTERVIEW_FEEDBACK = [
    "Great STAR structure! Keep practicing to improve confidence and delivery",
    "Consider varying your tone and pacing for better engagement",
]


def validate_interview_input(prompt: Optional[str], response: Optional[str]) -> None:
    """Both prompt and response are required (whitespace-only counts as missing)."""
    errors = []
    if not prompt or not prompt.strip():
        errors.append({"field": "prompt", "message": "Prompt is required"})
    if not response or not response.strip():
        errors.append({"field": "response", "message": "Response is required"})
    if errors:
        raise ValidationError("Prompt and response are required", errors=errors)


def score_interview(prompt: Optional[str], response: Optional[str]) -> Dict:
    """
    Score a mock-interview answer.

    25 points per STAR component found, up to 30 for length
    (5 per 10 words), plus a 10 point base; capped at 100.

    Returns:
        {"score", "feedback", "wordCount", "starComponents": {situation, task, action, result}}
    """
    validate_interview_input(prompt, response)

    word_count = len(response.split())
    components = {name: bool(pattern.search(response)) for name, pattern in STAR_PATTERNS.items()}

    star_score = 25 * sum(components.values())
    length_score = min(30, (word_count // 10) * 5)
    total_score = min(100, star_score + length_score + 10)

    feedback = [STAR_FEEDBACK[name] for name, present in components.items() if not present]
    if word_count < SHORT_ANSWER_WORDS:
        feedback.append("Expand your response with more details and specific examples")
    if not feedback:
        feedback = list(GENERIC_INTERVIEW_FEEDBACK)

    return {
        "score": total_score,
        "feedback": feedback,
        "wordCount": word_count,
        "starComponents": components,
    }


# ============================================================
# CONFIDENCE PULSE
# ============================================================

def confidence_pulse(interview_count: int, avg_score: float, total_applications: int) -> int:
    """
    Blend practice volume, practice quality and application activity.

    40 (interviews x 8) + 30 (avg score x 0.3) + 30 (applications x 3),
    each part capped, so the sum never exceeds 100.
    """
    interview_weight = min(40, (interview_count or 0) * 8)
    score_weight = min(30, float(avg_score or 0) * 0.3)
    activity_weight = min(30, (total_applications or 0) * 3)
    # round half up, not round-half-even
    return int(math.floor(interview_weight + score_weight + activity_weight + 0.5))
