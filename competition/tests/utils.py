from django.contrib.auth import get_user_model

from common.enums import CourseStatus, EnrollmentStatus, Role
from competition.models import Quiz, QuizQuestion
from learning.models import Course, Enrollment, Lesson

User = get_user_model()


def make_user(username, role=Role.STUDENT, **extra):
    return User.objects.create_user(username, f"{username}@example.com", "pass", role=role, **extra)


def make_course(code="course-1", instructor=None):
    instructor = instructor or make_user(f"{code}-instructor", role=Role.INSTRUCTOR)
    return Course.objects.create(instructor=instructor, title=code.title(), code=code,
                                 status=CourseStatus.PUBLISHED)


def make_quiz(course, *, order=1, weights=(1, 1), passing_score=70, max_attempts=3,
              time_limit_minutes=30, is_published=True):
    """Quiz with one question per weight; every correct answer is 'A'."""
    lesson = Lesson.objects.create(course=course, title=f"Lesson {order}", sequence_order=order, is_published=True)
    quiz = Quiz.objects.create(
        lesson=lesson, title=f"Quiz {order}", passing_score=passing_score, max_attempts=max_attempts,
        time_limit_minutes=time_limit_minutes, is_published=is_published,
    )
    for i, weight in enumerate(weights, start=1):
        QuizQuestion.objects.create(
            quiz=quiz, order=i, text=f"Question {i}", option_a="right", option_b="wrong",
            correct_answer="A", points=weight,
        )
    return quiz


def enroll(student, course, status=EnrollmentStatus.ACTIVE):
    return Enrollment.objects.create(student=student, course=course, status=status)


def answers_for(quiz, correct=None):
    """Answer map with the first ``correct`` questions right and the rest wrong."""
    questions = list(quiz.questions.order_by("order"))
    correct = len(questions) if correct is None else correct
    return {str(q.pk): ("A" if i < correct else "B") for i, q in enumerate(questions)}
