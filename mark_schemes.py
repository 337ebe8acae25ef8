"""
=============================================================================
Mark Schemes for Student Records
=============================================================================

Describes the three mark-scheme variants a deployment can run with. Exactly
one scheme is active per deployment; the validator, metrics and exports all
read their subjects, fields and ranges from the scheme object instead of
hard-coding column names.

Variants:
- A: SE / IA / Total per subject, plus TW on Math IV. Result P/F + Pointer.
- B: SemExam / IAExam / TermMarks / Viva per subject. Total CGPA.
- C: UnitTest / SemMarks per subject. Total CGPA.

Date: 2026-10-19
Version: 1.0
=============================================================================
"""

import re
from typing import Dict, List, Optional


# Identity columns shared by every scheme (record key -> meaning)
IDENTITY_FIELDS = ['seat_number', 'roll_no', 'student_name', 'gender']

GENDERS = ['Male', 'Female', 'Other']

_INT_PREFIX = re.compile(r'^\s*([+-]?\d+)')
_FLOAT_PREFIX = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')


class MarkField:
    """One mark column of a subject (e.g. SE, IA, Unit Test)"""

    def __init__(self, key: str, label: str, minimum: int, maximum: int,
                 header: str, counts_toward_total: bool = True):
        self.key = key
        self.label = label
        self.minimum = minimum
        self.maximum = maximum
        self.header = header  # header suffix/pattern, see Subject.header_for
        self.counts_toward_total = counts_toward_total

    def in_range(self, value) -> bool:
        return self.minimum <= value <= self.maximum

    def __repr__(self):
        return f"<MarkField(key={self.key}, range={self.minimum}-{self.maximum})>"


class Subject:
    """Subject with its ordered mark fields"""

    def __init__(self, key: str, name: str, fields: List[MarkField], header_prefix: str):
        self.key = key
        self.name = name
        self.fields = fields
        self.header_prefix = header_prefix

    def record_key(self, field: MarkField) -> str:
        return f"{self.key}_{field.key}"

    def header_for(self, field: MarkField) -> str:
        return field.header.format(prefix=self.header_prefix)

    @property
    def max_total(self) -> int:
        return sum(f.maximum for f in self.fields if f.counts_toward_total)

    def __repr__(self):
        return f"<Subject(key={self.key}, fields={[f.key for f in self.fields]})>"


class MarkScheme:
    """
    Tagged configuration for one mark-scheme variant.

    The column order of the CSV is the identity headers, then every subject's
    fields in declared order, then the final headers. Values in data rows are
    read positionally in this order.
    """

    def __init__(self, name: str, title: str, identity_headers: List[str],
                 subjects: List[Subject], final_headers: List[str],
                 cgpa_label: str, has_result: bool = False,
                 sample_rows: Optional[List[str]] = None):
        self.name = name
        self.title = title
        self.identity_headers = identity_headers  # seat, roll, name, gender headers
        self.subjects = subjects
        self.final_headers = final_headers
        self.cgpa_label = cgpa_label
        self.has_result = has_result
        self.sample_rows = sample_rows or []

    @property
    def expected_headers(self) -> List[str]:
        headers = list(self.identity_headers)
        for subject in self.subjects:
            headers.extend(subject.header_for(f) for f in subject.fields)
        headers.extend(self.final_headers)
        return headers

    @property
    def column_keys(self) -> List[str]:
        """Record keys in CSV column order"""
        keys = self.identity_keys()
        for subject in self.subjects:
            keys.extend(subject.record_key(f) for f in subject.fields)
        if self.has_result:
            keys.append('result')
        keys.append('total_cgpa')
        return keys

    def identity_keys(self) -> List[str]:
        # Variant A carries "Sr" first, read into roll_no
        if self.identity_headers[0] == 'Sr':
            return ['roll_no', 'seat_number', 'student_name', 'gender']
        return ['seat_number', 'roll_no', 'student_name', 'gender']

    def mark_keys(self) -> List[str]:
        return [s.record_key(f) for s in self.subjects for f in s.fields]

    @property
    def max_possible_total(self) -> int:
        return sum(s.max_total for s in self.subjects)

    def __repr__(self):
        return f"<MarkScheme(name={self.name}, subjects={len(self.subjects)})>"


def _variant_a() -> MarkScheme:
    def fields(has_tw: bool) -> List[MarkField]:
        result = [
            MarkField('se', 'SE', 0, 80, '{prefix} (SE)', counts_toward_total=False),
            MarkField('ia', 'IA', 0, 20, '{prefix} (IA)', counts_toward_total=False),
            MarkField('total', 'Total', 0, 100, '{prefix} (Total)'),
        ]
        if has_tw:
            result.append(MarkField('tw', 'TW', 0, 25, '{prefix} (TW)'))
        return result

    subjects = [
        Subject('math_iv', 'Math IV', fields(True), 'Math IV'),
        Subject('algo', 'Algo', fields(False), 'Algo'),
        Subject('dbms', 'DBMS', fields(False), 'DBMS'),
        Subject('os', 'OS', fields(False), 'OS'),
        Subject('micro', 'Micro', fields(False), 'Micro'),
    ]
    return MarkScheme(
        name='A',
        title='SE/IA/Total/TW',
        identity_headers=['Sr', 'Seat No', 'Student Name', 'M/F'],
        subjects=subjects,
        final_headers=['Result P/F', 'Pointer'],
        cgpa_label='Pointer',
        has_result=True,
        sample_rows=[
            '1,154201,ACHAREKAR ROHAN PRASAD,M,52,13,65,20,45,16,61,40,13,53,32,11,43,50,11,61,P,7.46',
            '2,154202,ADEKAR NITESH GORAKHNATH,M,71,18,89,23,64,18,82,69,20,89,53,17,70,68,16,84,P,9.45',
        ],
    )


def _variant_b() -> MarkScheme:
    subjects = []
    for i in range(1, 6):
        subjects.append(Subject(f'subject{i}', f'Subject {i}', [
            MarkField('sem_exam', 'Sem Exam', 0, 80, '{prefix}_SemExam'),
            MarkField('ia_exam', 'IA Exam', 0, 20, '{prefix}_IAExam'),
            MarkField('term_marks', 'Term Marks', 0, 100, '{prefix}_TermMarks'),
            MarkField('viva_marks', 'Viva', 0, 25, '{prefix}_Viva'),
        ], f'S{i}'))
    return MarkScheme(
        name='B',
        title='SemExam/IAExam/TermMarks/Viva',
        identity_headers=['Seat Number', 'Roll No', 'Student Name', 'Gender'],
        subjects=subjects,
        final_headers=['Total_CGPA'],
        cgpa_label='Total CGPA',
        sample_rows=[
            '123456,01,Asha Patil,Female,70,18,85,22,65,17,80,20,72,19,88,23,60,15,75,18,68,16,82,21,8.9',
            '123457,02,Rahul Shinde,Male,55,14,66,18,48,12,58,15,62,16,74,19,50,13,61,17,58,15,70,18,7.2',
        ],
    )


def _variant_c() -> MarkScheme:
    subjects = []
    for i in range(1, 6):
        subjects.append(Subject(f'subject{i}', f'Subject {i}', [
            MarkField('unit_test', 'Unit Test', 0, 20, '{prefix}_UnitTest'),
            MarkField('sem_marks', 'Sem Marks', 0, 90, '{prefix}_SemMarks'),
        ], f'Subject{i}'))
    return MarkScheme(
        name='C',
        title='UnitTest/SemMarks',
        identity_headers=['Seat Number', 'Roll No', 'Student Name', 'Gender'],
        subjects=subjects,
        final_headers=['Total_CGPA'],
        cgpa_label='Total CGPA',
        sample_rows=[
            '123456,01,John Doe,Male,18,75,19,80,17,72,20,85,18,78,8.75',
            '123457,02,Jane Smith,Female,16,70,18,82,19,76,17,79,20,88,8.92',
        ],
    )


SCHEMES: Dict[str, MarkScheme] = {
    'A': _variant_a(),
    'B': _variant_b(),
    'C': _variant_c(),
}


def get_scheme(name: str) -> MarkScheme:
    """
    Look up a mark scheme by variant name.

    Args:
        name: "A", "B" or "C" (case-insensitive)

    Returns:
        MarkScheme object

    Raises:
        KeyError: if the name is not a known variant
    """
    key = str(name).strip().upper()
    if key not in SCHEMES:
        raise KeyError(f"Unknown mark scheme '{name}' (known: {', '.join(sorted(SCHEMES))})")
    return SCHEMES[key]


def coerce_or_default(raw, kind: str = 'int', default=0):
    """
    Silent coercion policy for numeric cells.

    Reads the leading numeric prefix of the value the way the upload form
    always has ("52" -> 52, "52.7" -> 52 as int, "12abc" -> 12). Anything that
    has no numeric prefix, including an empty cell, becomes `default`.
    Never raises; out-of-range values are the validator's business.

    Args:
        raw: Cell value (str, int, float or None)
        kind: 'int' or 'float'
        default: Value returned when nothing can be parsed

    Returns:
        Parsed number or default
    """
    if raw is None:
        return default
    if isinstance(raw, bool):
        return default
    if isinstance(raw, (int, float)):
        if kind == 'int':
            return int(raw)
        return float(raw)

    text = str(raw)
    if kind == 'int':
        match = _INT_PREFIX.match(text)
        return int(match.group(1)) if match else default

    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else default


def normalize_gender(raw) -> Optional[str]:
    """Map raw gender cells (M/F/O or full words) to Male/Female/Other, else None"""
    if raw is None:
        return None
    value = str(raw).strip().lower()
    if value in ('m', 'male'):
        return 'Male'
    if value in ('f', 'female'):
        return 'Female'
    if value in ('o', 'other'):
        return 'Other'
    return None


def normalize_result(raw) -> str:
    """P/PASS -> P, F/FAIL -> F, empty -> P; anything else is returned upper-cased"""
    value = str(raw or '').strip().upper()
    if not value:
        return 'P'
    if value in ('P', 'PASS'):
        return 'P'
    if value in ('F', 'FAIL'):
        return 'F'
    return value


def template_csv(scheme: MarkScheme) -> str:
    """Header line plus sample rows for the upload template"""
    lines = [','.join(scheme.expected_headers)]
    lines.extend(scheme.sample_rows)
    return '\n'.join(lines) + '\n'
