# scripts/seed_competition.py
# Usage: python manage.py runscript seed_competition
from django.contrib.auth import get_user_model
from django.db import transaction

from common.enums import CourseStatus, DifficultyLevel, Role
from competition.models import Quiz, QuizQuestion
from competition.services import refresh_course_leaderboard
from learning.models import Course, Enrollment, Lesson

COURSE_CODE = "py-basics"

LESSONS = [
    ("Variables and types", [
        ("Which type does 3 / 2 produce in Python 3?", ["int", "float", "Decimal", "str"], "B", 1),
        ("What does len('abc') return?", ["2", "3", "'abc'", "None"], "B", 1),
        ("Which of these is immutable?", ["list", "dict", "tuple", "set"], "C", 2),
    ]),
    ("Control flow", [
        ("Which keyword exits a loop early?", ["stop", "exit", "break", "return"], "C", 1),
        ("range(3) yields", ["1, 2, 3", "0, 1, 2", "0, 1, 2, 3", "3"], "B", 1),
    ]),
    ("Functions", [
        ("Default argument values are evaluated", ["on every call", "once, at definition", "lazily", "never"], "B", 2),
        ("A function without return gives back", ["0", "''", "None", "False"], "C", 1),
    ]),
]


def run(*args):
    User = get_user_model()

    with transaction.atomic():
        instructor, created_now = User.objects.get_or_create(
            username="instructor1",
            defaults={"role": Role.INSTRUCTOR, "email": "instructor1@example.com", "is_active": True},
        )
        if created_now:
            instructor.set_password("123")
            instructor.save()

        course, _ = Course.objects.update_or_create(
            code=COURSE_CODE,
            defaults={
                "instructor": instructor,
                "title": "Python Basics",
                "description": "Demo course with one quiz per lesson.",
                "status": CourseStatus.PUBLISHED,
                "difficulty_level": DifficultyLevel.BEGINNER,
                "is_featured": True,
            },
        )

        for order, (title, questions) in enumerate(LESSONS, start=1):
            lesson, _ = Lesson.objects.update_or_create(
                course=course, sequence_order=order,
                defaults={"title": title, "is_published": True},
            )
            quiz, _ = Quiz.objects.update_or_create(
                lesson=lesson,
                defaults={"title": f"{title} quiz", "passing_score": 70, "max_attempts": 3,
                          "time_limit_minutes": 15, "is_published": True},
            )
            # keep it idempotent; questions are rebuilt on every run
            quiz.questions.all().delete()
            QuizQuestion.objects.bulk_create([
                QuizQuestion(
                    quiz=quiz, order=i, text=text,
                    option_a=opts[0], option_b=opts[1], option_c=opts[2], option_d=opts[3],
                    correct_answer=answer, points=points,
                )
                for i, (text, opts, answer, points) in enumerate(questions, start=1)
            ])

        created = 0
        for i in range(1, 11):
            username = f"student{i}"
            user, created_now = User.objects.get_or_create(
                username=username,
                defaults={"role": Role.STUDENT, "email": f"{username}@example.com", "is_active": True},
            )
            if created_now:
                user.set_password("123")
                user.save()
                created += 1
            Enrollment.objects.get_or_create(student=user, course=course)

    rows = refresh_course_leaderboard(course.pk)
    print(f"Done. Course '{course.code}' with {len(LESSONS)} quizzes; "
          f"created {created} student(s); {len(rows)} on the leaderboard.")
