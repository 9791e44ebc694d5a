# competition/management/commands/import_quiz_questions.py
import re

import pandas as pd
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.db.models import Max

from competition.models import Quiz, QuizQuestion

QUESTION_RE = re.compile(r"^\s*question\b\s*[:\-]?\s*(.*)$", re.IGNORECASE)
OPTION_RE   = re.compile(r"^\s*\(?([A-Da-d])\)?[.)]?\s+(.*)$")
ANSWER_RE   = re.compile(r"^\s*answer\b\s*[:\-]?\s*\(?([A-Da-d])\)?", re.IGNORECASE)
POINTS_RE   = re.compile(r"^\s*points?\b\s*[:\-]?\s*(\d+)", re.IGNORECASE)


def _clean(s):
    if s is None:
        return ""
    s = str(s).strip()
    # strip stray "Q1." / "1)" numbers at start
    s = re.sub(r"^\s*(?:Q?\d+[.)-]\s*)", "", s, flags=re.IGNORECASE)
    return s


def _is_marker(line):
    return bool(QUESTION_RE.match(line) or ANSWER_RE.match(line) or OPTION_RE.match(line) or POINTS_RE.match(line))


def parse_lines(lines, default_points=1):
    """
    lines: list[str] from the first column of the sheet.
    Returns: list of dicts: {text, options: {letter: text}, correct: 'A'..'D', points}
    Blocks without at least options A and B, or without an answer naming one
    of the given options, are skipped.
    """
    out = []
    i = 0
    n = len(lines)

    while i < n:
        m_q = QUESTION_RE.match(_clean(lines[i]))
        if not m_q:
            i += 1
            continue

        text = m_q.group(1).strip()
        i += 1
        options = {}
        correct = None
        points = default_points

        while i < n:
            curr = _clean(lines[i])
            if QUESTION_RE.match(curr):
                break

            m_ans = ANSWER_RE.match(curr)
            if m_ans:
                correct = m_ans.group(1).upper()
                i += 1
                if i < n:
                    m_pts = POINTS_RE.match(_clean(lines[i]))
                    if m_pts:
                        points = int(m_pts.group(1))
                        i += 1
                break

            m_opt = OPTION_RE.match(curr)
            if m_opt:
                letter = m_opt.group(1).upper()
                opt_text = m_opt.group(2).strip()
                i += 1
                # multi-line option continuation
                while i < n and not _is_marker(_clean(lines[i])):
                    opt_text = (opt_text + " " + _clean(lines[i])).strip()
                    i += 1
                options[letter] = opt_text
                continue

            text = (text + " " + curr).strip()
            i += 1

        if "A" not in options or "B" not in options or correct not in options or points < 1:
            continue

        out.append({"text": text, "options": options, "correct": correct, "points": points})

    return out


class Command(BaseCommand):
    help = "Import single-choice questions into a quiz from an Excel file laid out as Question / A-D / Answer / Points rows."

    def add_arguments(self, parser):
        parser.add_argument("quiz_id", help="Target quiz id (uuid)")
        parser.add_argument("file", help="Path to .xlsx file")
        parser.add_argument("--sheet", default=0, help="Worksheet name or index (default: first sheet)")
        parser.add_argument("--points", type=int, default=1, help="Points for blocks without a Points line")
        parser.add_argument("--replace", action="store_true", help="Delete the quiz's existing questions first")
        parser.add_argument("--dry-run", action="store_true", help="Parse only, do not write to DB")

    def handle(self, *args, **opts):
        try:
            quiz = Quiz.objects.get(pk=opts["quiz_id"])
        except (Quiz.DoesNotExist, ValidationError):
            raise CommandError(f"Quiz {opts['quiz_id']} not found.")

        path = opts["file"]
        self.stdout.write(f"Reading file: {path}")
        try:
            # header=None so the first row is not swallowed as a header
            df = pd.read_excel(path, sheet_name=opts["sheet"], header=None, engine="openpyxl")
        except Exception as e:
            raise CommandError(f"Failed to read Excel: {e}") from e

        col0 = df.iloc[:, 0].dropna().tolist()
        lines = [str(x) for x in col0 if str(x).strip()]

        blocks = parse_lines(lines, default_points=opts["points"])
        self.stdout.write(f"Parsed {len(blocks)} question(s) from Excel.")

        if opts["dry_run"]:
            self.stdout.write("Dry-run complete. No DB changes made.")
            return

        with transaction.atomic():
            if opts["replace"]:
                quiz.questions.all().delete()
            start = quiz.questions.aggregate(m=Max("order"))["m"] or 0

            QuizQuestion.objects.bulk_create([
                QuizQuestion(
                    quiz=quiz,
                    text=b["text"],
                    option_a=b["options"]["A"],
                    option_b=b["options"]["B"],
                    option_c=b["options"].get("C", ""),
                    option_d=b["options"].get("D", ""),
                    correct_answer=b["correct"],
                    points=b["points"],
                    order=start + idx,
                )
                for idx, b in enumerate(blocks, start=1)
            ])

        self.stdout.write(self.style.SUCCESS(f"Imported {len(blocks)} question(s) into '{quiz.title}'."))
