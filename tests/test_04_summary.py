"""
Summary Tests - Report Card Derivation

Analytics -> subject rows -> overall average -> level -> feedback.
All derivations are pure, so learner and approver see identical reports.
"""

from datetime import datetime

from report_workflow.models import ReportSubjectRow
from report_workflow.summary import (
    NO_DATA_FEEDBACK,
    build_feedback_comment,
    build_subject_rows,
    calculate_overall_average,
    clamp_score,
    format_report_date,
    get_grade_from_score,
    get_performance_level,
    get_school_year_label,
    resolve_base_score,
)


def row(subject, total):
    return ReportSubjectRow(subject, total, total, total, total, get_grade_from_score(total))


class TestGrades:
    """Threshold boundaries."""

    def test_grade_boundaries(self):
        expected = {100: 'A', 85: 'A', 84: 'B', 70: 'B', 69: 'C', 55: 'C', 54: 'D', 0: 'D'}
        for score, grade in expected.items():
            assert get_grade_from_score(score) == grade, f"{score} should be {grade}"

    def test_performance_levels(self):
        assert get_performance_level(85) == 'Excellent'
        assert get_performance_level(84) == 'Very Good'
        assert get_performance_level(70) == 'Very Good'
        assert get_performance_level(55) == 'Good'
        assert get_performance_level(54) == 'Needs Improvement'

    def test_clamp_score(self):
        assert clamp_score(84.5) == 85
        assert clamp_score(84.49) == 84
        assert clamp_score(-3) == 0
        assert clamp_score(140) == 100
        assert clamp_score(float('inf')) == 100
        assert clamp_score(float('-inf')) == 0
        assert clamp_score(float('nan')) == 0


class TestSubjectRows:
    """Building rows from analytics."""

    def test_explicit_terms_are_used(self):
        rows = build_subject_rows([
            {'subject': 'Math', 'firstTerm': 80, 'secondTerm': 90, 'thirdTerm': 70},
        ])
        assert len(rows) == 1
        assert (rows[0].first_term, rows[0].second_term, rows[0].third_term) == (80, 90, 70)
        assert rows[0].total == 80
        assert rows[0].grade == 'B'

    def test_terms_are_synthesized_with_drift(self):
        """Position in the list shifts synthesized terms by -1, 0, +1."""
        rows = build_subject_rows([
            {'subject': 'A', 'averageScore': 80},
            {'subject': 'B', 'averageScore': 80},
            {'subject': 'C', 'averageScore': 80},
        ])
        terms = [(r.first_term, r.second_term, r.third_term, r.total) for r in rows]
        assert terms == [(75, 79, 83, 79), (76, 80, 84, 80), (77, 81, 85, 81)]

    def test_same_subject_is_averaged_per_term(self):
        rows = build_subject_rows([
            {'subject': 'Art', 'averageScore': 60},
            {'subject': 'Art', 'averageScore': 70},
        ])
        assert len(rows) == 1
        art = rows[0]
        assert (art.first_term, art.second_term, art.third_term) == (61, 65, 69)
        assert art.total == 65
        assert art.grade == 'C'

    def test_scores_stay_in_range(self):
        rows = build_subject_rows([{'subject': 'PE', 'averageScore': 150}, {'subject': 'Music', 'score': -20}])
        for subject in rows:
            for value in (subject.first_term, subject.second_term, subject.third_term, subject.total):
                assert 0 <= value <= 100, f"{subject.subject} has {value}"

    def test_overflowing_ratio_is_clamped(self):
        """Ratios too large for a float are treated as full marks."""
        assert resolve_base_score({'totalScore': 1e308, 'totalPossible': 1e-10}) == 100
        assert resolve_base_score({'passed': 1e308, 'attempts': 0.5}) == 100
        assert resolve_base_score({'totalScore': -1e308, 'totalPossible': 1e-10}) == 0
        rows = build_subject_rows([{'subject': 'Math', 'totalScore': 1e308, 'totalPossible': 1e-10}])
        assert rows[0].total <= 100

    def test_base_score_sources(self):
        assert resolve_base_score({'averageScore': '72.4'}) == 72
        assert resolve_base_score({'passed': 3, 'attempts': 4}) == 75
        assert resolve_base_score({'totalScore': 45, 'totalPossible': 50}) == 90
        assert resolve_base_score({'passed': 1, 'attempts': 0}) == 0
        assert resolve_base_score({}) == 0

    def test_rows_sorted_case_insensitively(self):
        rows = build_subject_rows([
            {'subject': 'biology', 'score': 50},
            {'subject': 'Algebra', 'score': 50},
            {'subject': 'chemistry', 'score': 50},
        ])
        assert [r.subject for r in rows] == ['Algebra', 'biology', 'chemistry']

    def test_subject_name_fallbacks(self):
        rows = build_subject_rows([{'quizTitle': 'Quiz 1', 'score': 50}, {'score': 50}])
        assert [r.subject for r in rows] == ['Quiz 1', 'Subject 2']

    def test_fallback_subjects_when_no_analytics(self):
        rows = build_subject_rows([], ['Geometry', 'Fractions'])
        assert [r.subject for r in rows] == ['Fractions', 'Geometry']
        assert all(r.total == 0 and r.grade == 'D' for r in rows)
        assert build_subject_rows(None) == []

    def test_derivation_is_pure(self):
        analytics = [{'subject': 'Math', 'averageScore': 77}, {'subject': 'Art', 'averageScore': 66}]
        assert build_subject_rows(analytics) == build_subject_rows(analytics)


class TestOverallAndFeedback:
    """Average, level and feedback sentence."""

    def test_overall_average(self):
        assert calculate_overall_average([row('A', 80), row('B', 91)]) == 86
        assert calculate_overall_average([]) == 0

    def test_feedback_per_level(self):
        subjects = [row('Math', 92), row('Art', 60)]
        excellent = build_feedback_comment(subjects, 'Excellent')
        assert excellent == (
            "The learner has shown strong progress in Math "
            "and maintains outstanding consistency across subjects."
        )
        very_good = build_feedback_comment(subjects, 'Very Good')
        assert 'especially in Math' in very_good
        assert 'More revision in Art' in very_good
        assert 'Targeted practice in Art' in build_feedback_comment(subjects, 'Good')
        assert 'particularly in Art' in build_feedback_comment(subjects, 'Needs Improvement')

    def test_feedback_without_subjects(self):
        assert build_feedback_comment([], 'Excellent') == NO_DATA_FEEDBACK

    def test_format_report_date(self):
        assert format_report_date('2026-02-12T09:30:00.000Z') == '2026-02-12'
        assert format_report_date(None) == 'N/A'
        assert format_report_date('yesterday') == 'N/A'

    def test_school_year_label(self):
        assert get_school_year_label(datetime(2026, 9, 1)) == '2026/2027'
        assert get_school_year_label(datetime(2026, 8, 1)) == '2026/2027'
        assert get_school_year_label(datetime(2026, 3, 1)) == '2025/2026'


def get_tests():
    """Return list of test functions for runner."""
    grades = TestGrades()
    rows = TestSubjectRows()
    overall = TestOverallAndFeedback()
    return [
        ("Grade boundaries", grades.test_grade_boundaries),
        ("Performance levels", grades.test_performance_levels),
        ("Clamp score", grades.test_clamp_score),
        ("Explicit terms are used", rows.test_explicit_terms_are_used),
        ("Terms are synthesized with drift", rows.test_terms_are_synthesized_with_drift),
        ("Same subject is averaged per term", rows.test_same_subject_is_averaged_per_term),
        ("Scores stay in range", rows.test_scores_stay_in_range),
        ("Overflowing ratio is clamped", rows.test_overflowing_ratio_is_clamped),
        ("Base score sources", rows.test_base_score_sources),
        ("Rows sorted case-insensitively", rows.test_rows_sorted_case_insensitively),
        ("Subject name fallbacks", rows.test_subject_name_fallbacks),
        ("Fallback subjects when no analytics", rows.test_fallback_subjects_when_no_analytics),
        ("Derivation is pure", rows.test_derivation_is_pure),
        ("Overall average", overall.test_overall_average),
        ("Feedback per level", overall.test_feedback_per_level),
        ("Feedback without subjects", overall.test_feedback_without_subjects),
        ("Format report date", overall.test_format_report_date),
        ("School year label", overall.test_school_year_label),
    ]
