import pytest

from roster import filter_and_sort_students, matches_search


@pytest.fixture
def roster(make_record):
    return [
        make_record(300003, 'Zara Khan', 'Female', roll_no='12', cgpa=8.1),
        make_record(300001, 'amit Rao', 'Male', roll_no='3', cgpa=9.4, sem_marks=10),
        make_record(300002, 'Neha Joshi', 'Female', cgpa=6.2),
        make_record(300004, 'Sam Lee', 'Other', roll_no='1', cgpa=7.0),
    ]


def names(records):
    return [r['student_name'] for r in records]


def test_default_sort_by_roll_number_missing_last(roster, scheme_c):
    result = filter_and_sort_students(roster, scheme_c)
    assert names(result) == ['Sam Lee', 'amit Rao', 'Zara Khan', 'Neha Joshi']


@pytest.mark.parametrize('sort_by, expected', [
    ('name', ['amit Rao', 'Neha Joshi', 'Sam Lee', 'Zara Khan']),
    ('cgpa', ['amit Rao', 'Zara Khan', 'Sam Lee', 'Neha Joshi']),
    ('seat_number', ['amit Rao', 'Neha Joshi', 'Zara Khan', 'Sam Lee']),
])
def test_sort_keys(roster, scheme_c, sort_by, expected):
    assert names(filter_and_sort_students(roster, scheme_c, sort_by=sort_by)) == expected


def test_unknown_sort_key(roster, scheme_c):
    with pytest.raises(ValueError):
        filter_and_sort_students(roster, scheme_c, sort_by='percentage')


def test_gender_filter(roster, scheme_c):
    result = filter_and_sort_students(roster, scheme_c, gender='female', sort_by='name')
    assert names(result) == ['Neha Joshi', 'Zara Khan']


def test_result_filter_uses_overall_percentage(roster, scheme_c):
    # amit: 5 x (10 + 10) = 100 / 550
    assert names(filter_and_sort_students(roster, scheme_c, result='fail')) == ['amit Rao']
    assert len(filter_and_sort_students(roster, scheme_c, result='pass')) == 3


@pytest.mark.parametrize('term, expected', [
    ('AMIT', True),
    ('30000', True),
    ('3', True),
    ('khan', False),
    ('', True),
])
def test_matches_search(roster, term, expected):
    assert matches_search(roster[1], term) is expected


def test_search_combines_with_filters(roster, scheme_c):
    result = filter_and_sort_students(roster, scheme_c, search='a', gender='female')
    assert names(result) == ['Zara Khan', 'Neha Joshi']


def test_input_list_is_not_modified(roster, scheme_c):
    before = list(roster)
    filter_and_sort_students(roster, scheme_c, sort_by='cgpa')
    assert roster == before
