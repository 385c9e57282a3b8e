from django.core.management.base import BaseCommand

from grades.models import GradingScale, GradingScaleGrade, CommentCodeScale, CommentCode

STANDARD_GRADES = [
    ('A+', 4.0, 90),
    ('A', 3.7, 85),
    ('B+', 3.3, 80),
    ('B', 3.0, 75),
    ('C+', 2.7, 70),
    ('C', 2.3, 65),
    ('D', 1.0, 60),
    ('F', 0.0, 0),
]

DEFAULT_COMMENT_CODES = [
    ('Excellent effort', 'EE'),
    ('Works well with others', 'WW'),
    ('Needs to complete homework', 'HW'),
    ('Needs improvement', 'NI'),
]


def seed_grading_scale():
    if GradingScale.objects.count():
        return None
    scale = GradingScale(
        title='Standard Grading Scale',
        is_default=True,
        hr_gpa_value=3.0,
        hhr_gpa_value=3.7,
        grades=[
            GradingScaleGrade(title=title, gpa_value=gpa, break_off=break_off, sort_order=index)
            for index, (title, gpa, break_off) in enumerate(STANDARD_GRADES, start=1)
        ],
    )
    scale.save()
    return scale


def seed_comment_codes():
    if CommentCodeScale.objects.count():
        return None
    scale = CommentCodeScale(title='General Comments', sort_order=1)
    scale.save()
    for index, (title, short_name) in enumerate(DEFAULT_COMMENT_CODES, start=1):
        CommentCode(scale=scale, title=title, short_name=short_name, sort_order=index).save()
    return scale


class Command(BaseCommand):
    help = 'Create the standard grading scale and a starter comment code scale'

    def handle(self, *args, **options):
        if seed_grading_scale():
            self.stdout.write(self.style.SUCCESS('Created Standard Grading Scale'))
        else:
            self.stdout.write('Grading scales already exist, skipping')

        if seed_comment_codes():
            self.stdout.write(self.style.SUCCESS('Created General Comments scale'))
        else:
            self.stdout.write('Comment code scales already exist, skipping')
