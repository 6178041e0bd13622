#!/usr/bin/env python3
"""
lessongate - command-line front end for the assessment & progression engine.

Reads JSON files and prints JSON results.

Usage:
  lessongate validate quiz.json               # finalization checks
  lessongate validate quiz.json --draft       # allow a quiz with no questions
  lessongate grade quiz.json answers.json
  lessongate order siblings.json
  lessongate progress course.json attempts.json --learner alice --viewed 3,4
  lessongate report course.json attempts.json --viewed viewed.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from lessongate.classroom import build_approval_report
from lessongate.engine import (
    compute_course_progress,
    grade_submission,
    order_of,
    unanswered_question_ids,
    validate_quiz_draft,
)
from lessongate.errors import InvalidInput
from lessongate.schemas import (
    CompletionPolicy,
    parse_answers,
    parse_attempts,
    parse_course,
    parse_quiz,
    parse_siblings,
    parse_viewed,
)
from lessongate.utils import load_settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_INVALID = 2


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidInput(f"{path} is not valid JSON: {e}") from e


def _emit(payload: Any):
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def _parse_ids(value: Optional[str]) -> set[int]:
    if not value:
        return set()
    try:
        return {int(part) for part in value.split(",") if part.strip()}
    except ValueError as e:
        raise InvalidInput(f"Expected comma-separated lesson ids, got {value!r}") from e


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

def cmd_validate(args, settings) -> int:
    quiz = parse_quiz(_read_json(args.quiz))
    result = validate_quiz_draft(quiz, finalize=not args.draft)
    if not result.ok:
        logger.warning(f"Quiz '{quiz.title}' has {len(result.issues)} issue(s)")
        _emit({"ok": False, "issues": [i.model_dump(mode="json") for i in result.issues]})
        return EXIT_REJECTED
    _emit({"ok": True, "quiz": result.quiz.model_dump(mode="json")})
    return EXIT_OK


def cmd_grade(args, settings) -> int:
    quiz = parse_quiz(_read_json(args.quiz))
    answers = parse_answers(_read_json(args.answers))
    missing = unanswered_question_ids(quiz, answers)
    if missing:
        logger.info(f"Unanswered questions scored as incorrect: {missing}")
    threshold = args.threshold if args.threshold is not None else settings.default_pass_threshold
    grade = grade_submission(quiz, answers, threshold)
    _emit(grade.model_dump(mode="json"))
    return EXIT_OK


def cmd_order(args, settings) -> int:
    siblings = parse_siblings(_read_json(args.siblings))
    _emit(order_of(siblings))
    return EXIT_OK


def cmd_progress(args, settings) -> int:
    course = parse_course(_read_json(args.course))
    attempts = parse_attempts(_read_json(args.attempts))
    policy = CompletionPolicy(args.policy) if args.policy else settings.completion_policy
    progress = compute_course_progress(
        course, attempts, args.learner, _parse_ids(args.viewed), policy
    )
    _emit(progress.model_dump(mode="json"))
    return EXIT_OK


def cmd_report(args, settings) -> int:
    course = parse_course(_read_json(args.course))
    attempts = parse_attempts(_read_json(args.attempts))
    viewed = parse_viewed(_read_json(args.viewed)) if args.viewed else None
    report = build_approval_report(course, attempts, viewed, policy=settings.completion_policy)
    _emit(report.model_dump(mode="json"))
    return EXIT_OK


# -----------------------------------------------------------------------------
# Main
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lessongate",
        description="Validate quizzes, grade submissions and compute learner progress",
    )
    parser.add_argument("--config", type=Path, help="YAML settings file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("validate", help="Check a quiz draft")
    p.add_argument("quiz", type=Path)
    p.add_argument("--draft", action="store_true", help="Pre-save draft: questions may be empty")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("grade", help="Grade answers against a quiz")
    p.add_argument("quiz", type=Path)
    p.add_argument("answers", type=Path)
    p.add_argument("--threshold", type=float, help="Pass threshold for quizzes without one")
    p.set_defaults(func=cmd_grade)

    p = sub.add_parser("order", help="Sequence siblings by order, then id")
    p.add_argument("siblings", type=Path)
    p.set_defaults(func=cmd_order)

    p = sub.add_parser("progress", help="Compute a learner's progress in a course")
    p.add_argument("course", type=Path)
    p.add_argument("attempts", type=Path)
    p.add_argument("--learner", required=True)
    p.add_argument("--viewed", help="Comma-separated ids of viewed lessons")
    p.add_argument("--policy", choices=[c.value for c in CompletionPolicy])
    p.set_defaults(func=cmd_progress)

    p = sub.add_parser("report", help="Module and course approvals for all learners")
    p.add_argument("course", type=Path)
    p.add_argument("attempts", type=Path)
    p.add_argument("--viewed", type=Path, help="JSON file mapping learner id to viewed lesson ids")
    p.set_defaults(func=cmd_report)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValidationError, yaml.YAMLError) as e:
        print(f"ERROR: Could not load settings: {e}", file=sys.stderr)
        return EXIT_INVALID

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    try:
        return args.func(args, settings)
    except InvalidInput as e:
        logger.error(str(e))
        return EXIT_INVALID
    except FileNotFoundError as e:
        logger.error(f"File not found: {e.filename}")
        return EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
