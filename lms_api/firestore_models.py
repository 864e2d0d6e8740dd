"""
Firestore document models using Python dataclasses.

Each model turns a request body into the document that gets written
(``from_payload``) and back into the camelCase field names stored in
Firestore (``to_dict``). Timestamps are not part of the models; the DAO
layer stamps them with ``SERVER_TIMESTAMP`` on write.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple


ROLES = ('student', 'instructor', 'admin')
DEFAULT_ROLE = 'student'


def round_percent(part: int, whole: int) -> int:
    """Percentage of ``part`` in ``whole``, rounded half up. 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ===========================================================================
# User
# ===========================================================================

@dataclass
class UserProfile:
    uid: str
    email: str
    name: str = ""
    role: str = DEFAULT_ROLE
    total_points: int = 0
    is_active: bool = True

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "name": self.display_name,
            "role": self.role,
            "totalPoints": self.total_points,
            "isActive": self.is_active,
        }


# ===========================================================================
# Course
# ===========================================================================

@dataclass
class Course:
    title: str
    description: str = ""
    thumbnail_url: str = ""
    is_published: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "thumbnailUrl": self.thumbnail_url,
            "isPublished": self.is_published,
        }

    @classmethod
    def from_payload(cls, body: Dict[str, Any]) -> Course:
        return cls(
            title=body["title"],
            description=body.get("description") or "",
            thumbnail_url=body.get("thumbnailUrl") or "",
            is_published=parse_published(body.get("isPublished")),
        )


def parse_published(value: Any) -> bool:
    """Read an ``isPublished`` flag. Missing means False; anything but a JSON boolean is rejected."""
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError("isPublished must be a boolean")
    return value


COURSE_FIELDS = ("title", "description", "thumbnailUrl", "isPublished")


# ===========================================================================
# Chapter
# ===========================================================================

@dataclass
class Chapter:
    title: str
    content: str = ""
    video_url: str = ""
    order: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "videoUrl": self.video_url,
            "order": self.order,
        }

    @classmethod
    def from_payload(cls, body: Dict[str, Any]) -> Chapter:
        order = body.get("order")
        return cls(
            title=body["title"],
            content=body.get("content") or "",
            video_url=body.get("videoUrl") or "",
            order=0 if order is None else order,
        )


CHAPTER_FIELDS = ("title", "content", "videoUrl", "order")


# ===========================================================================
# Quiz
# ===========================================================================

@dataclass
class QuizQuestion:
    question: str
    options: List[str] = field(default_factory=list)
    correct_answer: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
        }

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> QuizQuestion:
        """Validate a question object. Raises ValueError describing the first problem."""
        if not isinstance(data, dict):
            raise ValueError(f"questions[{index}] must be an object")
        question = data.get("question")
        options = data.get("options")
        correct = data.get("correctAnswer")
        if not isinstance(question, str) or not question:
            raise ValueError(f"questions[{index}].question is required")
        if not isinstance(options, list) or not options or not all(isinstance(o, str) for o in options):
            raise ValueError(f"questions[{index}].options must be a non-empty list of strings")
        if not _is_int(correct) or not 0 <= correct < len(options):
            raise ValueError(f"questions[{index}].correctAnswer must be an index into options")
        return cls(question=question, options=options, correct_answer=correct)


def parse_questions(raw: Any) -> List[QuizQuestion]:
    if not isinstance(raw, list):
        raise ValueError("questions must be an array")
    return [QuizQuestion.from_dict(item, i) for i, item in enumerate(raw)]


def public_questions(questions: Optional[Sequence[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Strip everything but the prompt and options from stored questions."""
    return [
        {"question": q.get("question"), "options": q.get("options")}
        for q in (questions or [])
    ]


def grade_answers(questions: Sequence[Dict[str, Any]], answers: Sequence[int]) -> Tuple[int, int]:
    """Score ``answers`` against stored questions. Returns (correct_count, score)."""
    correct_count = sum(
        1 for question, answer in zip(questions, answers)
        if question.get("correctAnswer") == answer
    )
    return correct_count, round_percent(correct_count, len(questions))


@dataclass
class QuizResult:
    user_id: str
    course_id: str
    quiz_id: str
    answers: List[int]
    correct_count: int
    total_questions: int
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "courseId": self.course_id,
            "quizId": self.quiz_id,
            "answers": list(self.answers),
            "score": self.score,
            "correctCount": self.correct_count,
            "totalQuestions": self.total_questions,
        }
