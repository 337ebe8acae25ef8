import pytest

from import_validator import build_record
from metrics import (
    subject_total, overall_total, overall_percentage, max_possible_total, is_pass,
    compute_aggregate, extremes, select_toppers, rank_records, cgpa_distribution,
    marksheet
)


def test_scenario_totals(scheme_c, scenario_row):
    record = build_record(scenario_row.split(','), scheme_c)

    assert subject_total(record, scheme_c.subjects[0]) == 18 + 75
    assert overall_total(record, scheme_c) == 482
    assert max_possible_total(scheme_c) == 550
    assert overall_percentage(record, scheme_c) == pytest.approx(482 / 550 * 100)
    assert is_pass(record, scheme_c)


def test_variant_a_subject_total_uses_recorded_total_and_tw(scheme_a, csv_row):
    record = build_record(csv_row(scheme_a).split(','), scheme_a)

    assert subject_total(record, scheme_a.subjects[0]) == 65 + 20
    assert subject_total(record, scheme_a.subjects[1]) == 61
    assert overall_total(record, scheme_a) == 85 + 61 + 53 + 43 + 61


def test_variant_b_subject_total_sums_all_fields(scheme_b, csv_row):
    record = build_record(csv_row(scheme_b).split(','), scheme_b)
    assert subject_total(record, scheme_b.subjects[0]) == 70 + 18 + 85 + 22
    assert scheme_b.subjects[0].max_total == 225


def test_percentage_is_monotonic_in_total(scheme_c, make_record):
    percentages = [
        overall_percentage(make_record(100000 + marks, sem_marks=marks), scheme_c)
        for marks in range(0, 91, 5)
    ]
    assert percentages == sorted(percentages)


def test_pass_threshold_boundary(scheme_c, make_record):
    # 5 subjects x (0 + 44) = 220 of 550 = exactly 40%
    record = make_record(123456, unit_test=0, sem_marks=44)
    assert overall_percentage(record, scheme_c) == pytest.approx(40)
    assert is_pass(record, scheme_c, 40)
    assert not is_pass(record, scheme_c, 41)


def test_empty_aggregate(scheme_c):
    report = compute_aggregate([], scheme_c)

    assert report['total_students'] == 0
    assert report['average_cgpa'] == 0
    assert report['topper'] is None
    assert report['toppers'] == []
    assert report['passed_students'] == 0
    assert report['failed_students'] == 0
    assert report['pass_percentage'] == 0
    assert report['gender_percentages'] == {'Male': 0, 'Female': 0, 'Other': 0, 'unset': 0}
    assert report['highest_total'] == 0
    assert report['lowest_cgpa'] == 0


def test_aggregate_report(scheme_c, make_record):
    records = [
        make_record(100001, 'Asha', 'Female', unit_test=18, sem_marks=80, cgpa=9.1),
        make_record(100002, 'Ravi', 'Male', unit_test=5, sem_marks=20, cgpa=4.2),
        make_record(100003, 'Kiran', 'Other', unit_test=15, sem_marks=60, cgpa=7.5),
        make_record(100004, 'Meera', None, unit_test=10, sem_marks=50, cgpa=9.1),
    ]
    report = compute_aggregate(records, scheme_c, pass_threshold_percent=40)

    assert report['total_students'] == 4
    assert report['gender_counts'] == {'Male': 1, 'Female': 1, 'Other': 1, 'unset': 1}
    assert report['gender_percentages']['Female'] == 25
    # Ravi: 5 x 25 = 125 / 550 = 22.7%
    assert report['passed_students'] == 3
    assert report['failed_students'] == 1
    assert report['passed_students'] + report['failed_students'] == report['total_students']
    assert report['pass_percentage'] == 75
    assert [t['student_name'] for t in report['toppers']] == ['Asha', 'Meera']
    assert report['topper']['student_name'] == 'Asha'
    assert report['average_cgpa'] == pytest.approx((9.1 + 4.2 + 7.5 + 9.1) / 4)
    assert report['highest_total'] == 5 * 98
    assert report['lowest_total'] == 5 * 25
    assert report['highest_cgpa'] == 9.1
    assert report['lowest_cgpa'] == 4.2
    assert report['max_possible_total'] == 550


def test_pass_threshold_is_caller_configurable(scheme_c, make_record):
    records = [make_record(100001, unit_test=10, sem_marks=50)]  # 300 / 550 = 54.5%
    assert compute_aggregate(records, scheme_c, 50)['passed_students'] == 1
    assert compute_aggregate(records, scheme_c, 60)['passed_students'] == 0


def test_toppers_keep_input_order_and_cap(make_record):
    records = [make_record(100000 + i, f'S{i}', cgpa=8.5) for i in range(5)]
    records.insert(2, make_record(100009, 'Low', cgpa=6.0))

    assert [t['student_name'] for t in select_toppers(records)] == ['S0', 'S1', 'S2']
    assert len(select_toppers(records, limit=10)) == 5


def test_toppers_when_every_cgpa_is_zero(make_record):
    records = [make_record(100001, 'A', cgpa=0), make_record(100002, 'B', cgpa=0)]
    assert [t['student_name'] for t in select_toppers(records)] == ['A', 'B']


def test_extremes(scheme_c, make_record):
    records = [
        make_record(100001, sem_marks=40, cgpa=6.0),
        make_record(100002, sem_marks=70, cgpa=5.5),
    ]
    assert extremes(records, scheme_c, by='total') == (5 * 80, 5 * 50)
    assert extremes(records, scheme_c, by='cgpa') == (6.0, 5.5)
    assert extremes([], scheme_c, by='cgpa') == (0, 0)


def test_extremes_unknown_key(scheme_c):
    with pytest.raises(ValueError):
        extremes([], scheme_c, by='rank')


def test_rank_records_competition_ranking(scheme_c, make_record):
    records = [
        make_record(100001, 'A', cgpa=7.0),
        make_record(100002, 'B', cgpa=9.0),
        make_record(100003, 'C', cgpa=7.0),
        make_record(100004, 'D', cgpa=6.0),
    ]
    ranked = [(rank, r['student_name']) for rank, r in rank_records(records, scheme_c)]
    assert ranked == [(1, 'B'), (2, 'A'), (2, 'C'), (4, 'D')]


def test_rank_records_by_total(scheme_c, make_record):
    records = [make_record(100001, 'A', sem_marks=30), make_record(100002, 'B', sem_marks=60)]
    assert [r['student_name'] for _, r in rank_records(records, scheme_c, by='total')] == ['B', 'A']


def test_cgpa_distribution(make_record):
    cgpas = [0, 4.99, 5.0, 6.5, 7.99, 8.0, 9.5, 10]
    records = [make_record(100000 + i, cgpa=c) for i, c in enumerate(cgpas)]

    assert cgpa_distribution(records) == {
        '0-5': 2, '5-6': 1, '6-7': 1, '7-8': 1, '8-9': 1, '9-10': 2,
    }


def test_marksheet_matches_dashboard_figures(scheme_c, scenario_row):
    record = build_record(scenario_row.split(','), scheme_c)
    sheet = marksheet(record, scheme_c)

    assert sheet['overall_total'] == overall_total(record, scheme_c)
    assert sheet['percentage'] == overall_percentage(record, scheme_c)
    assert sheet['subjects'][0]['marks'] == [('Unit Test', 18, 20), ('Sem Marks', 75, 90)]
    assert sheet['subjects'][0]['total'] == 93
    assert sheet['subjects'][0]['max_total'] == 110
    assert sheet['passed'] is True
    assert sheet['cgpa_label'] == 'Total CGPA'
    assert 'result' not in sheet


def test_marksheet_variant_a_carries_result(scheme_a, csv_row):
    record = build_record(csv_row(scheme_a, result='F').split(','), scheme_a)
    assert marksheet(record, scheme_a)['result'] == 'F'
