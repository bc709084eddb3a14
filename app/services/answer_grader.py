"""
Deterministic answer checking for auto-graded question types
"""
import json
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

CHOICE_TYPES = ("single_choice", "multiple_choice")
MULTI_SELECT = "multiple_select"
TRUE_FALSE = "true_false"
TEXT_TYPES = ("fill_in_blank", "short_answer")
ESSAY = "essay"


class AnswerGrader:
    """
    Decides whether a submitted answer matches a question's correct answer
    
    Correct answers are stored in several encodings depending on the
    question type:
    - choice: option index, or the option value itself
    - multiple_select: list of option indices, or list of option values
    - true_false: 0/1, or a boolean
    - fill_in_blank / short_answer: text, compared case-insensitively
    
    Essays always need a human grader and are never auto-correct.
    """
    
    def is_correct(self, question: Dict[str, Any], submitted: Any) -> bool:
        """
        Check one answer
        
        Args:
            question: Dict with question_type, correct_answer and options
            submitted: Answer as sent by the client
            
        Returns:
            True when the answer matches under the type's comparison rule
        """
        question_type = question.get("question_type")
        correct = question.get("correct_answer")
        options = question.get("options")
        
        if question_type in CHOICE_TYPES:
            return self._check_choice(correct, submitted, options)
        if question_type == MULTI_SELECT:
            return self._check_multi_select(correct, submitted, options)
        if question_type == TRUE_FALSE:
            return self._check_true_false(correct, submitted)
        if question_type in TEXT_TYPES:
            return _as_text(submitted).strip().lower() == _as_text(correct).strip().lower()
        if question_type == ESSAY:
            return False
        
        logger.warning(f"Unknown question type '{question_type}' for question {question.get('id')}")
        return False
    
    def _check_choice(self, correct: Any, submitted: Any, options: Optional[List[Any]]) -> bool:
        # Index stored, option text submitted
        if _is_index(correct) and isinstance(submitted, str) and options:
            return _option_at(options, correct) == submitted
        return _strict_equals(submitted, correct)
    
    def _check_multi_select(self, correct: Any, submitted: Any, options: Optional[List[Any]]) -> bool:
        if not isinstance(correct, list) or not isinstance(submitted, list):
            return False
        
        # Indices stored, option texts submitted; same-typed lists compare as they are
        if (
            options
            and correct
            and all(_is_index(idx) for idx in correct)
            and all(isinstance(value, str) for value in submitted)
        ):
            correct = [_option_at(options, idx) for idx in correct]
        
        return _canonical(submitted) == _canonical(correct)
    
    def _check_true_false(self, correct: Any, submitted: Any) -> bool:
        if _is_number(correct):
            return isinstance(submitted, bool) and submitted == (correct == 1)
        return _strict_equals(submitted, correct)


def _is_number(value: Any) -> bool:
    # bool is an int subclass; True must never count as index 1
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_index(value: Any) -> bool:
    return _is_number(value) and float(value).is_integer()


def _option_at(options: List[Any], index: Any) -> Any:
    index = int(index)
    if 0 <= index < len(options):
        return options[index]
    return None


def _strict_equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    if _is_number(left) != _is_number(right):
        return False
    return left == right


def _canonical(values: List[Any]) -> str:
    """Order-independent, duplicate-sensitive serialization of a list"""
    ordered = sorted(values, key=lambda v: (type(v).__name__, json.dumps(v, sort_keys=True, default=str)))
    return json.dumps(ordered, sort_keys=True, default=str)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# Global instance
answer_grader = AnswerGrader()
