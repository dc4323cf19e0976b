from werkzeug.datastructures import MultiDict

from boxito.core.tables import TableQuery, as_number, contains, page_window

ROWS = [
    {'id': 1, 'cliente': 'Acme SA', 'monto': 300.0, 'status': 'APROBADO'},
    {'id': 2, 'cliente': 'Beta SC', 'monto': None, 'status': 'PENDIENTE'},
    {'id': 3, 'cliente': 'acme norte', 'monto': 50, 'status': 'RECHAZADO'},
    {'id': 4, 'cliente': 'Gamma', 'monto': 1200.5, 'status': 'APROBADO'},
]


def test_contains_is_case_insensitive():
    assert contains('ACME SA', 'acme')
    assert contains(None, '')
    assert not contains(None, 'x')
    assert contains(649, '64')


def test_as_number():
    assert as_number('12.5') == 12.5
    assert as_number(None) == 0
    assert as_number('') == 0
    assert as_number('abc') == 0


def test_search_matches_any_column():
    page = TableQuery(search='acme').apply(ROWS)
    assert [row['id'] for row in page.rows] == [1, 3]
    assert page.total == 2


def test_column_filters():
    page = TableQuery(column_filters={'status': 'aprob'}).apply(ROWS)
    assert [row['id'] for row in page.rows] == [1, 4]


def test_sort_puts_blanks_first_and_reverses():
    ascending = TableQuery(sort_key='monto').apply(ROWS)
    assert [row['id'] for row in ascending.rows] == [2, 3, 1, 4]
    descending = TableQuery(sort_key='monto', sort_direction='desc').apply(ROWS)
    assert [row['id'] for row in descending.rows] == [4, 1, 3, 2]


def test_sort_mixed_text_and_numbers():
    rows = [{'v': 'b'}, {'v': 2}, {'v': 'A'}, {'v': 1}]
    page = TableQuery(sort_key='v').apply(rows)
    assert [row['v'] for row in page.rows] == [1, 2, 'A', 'b']


def test_pagination_clamps_page():
    rows = [{'n': n} for n in range(23)]
    page = TableQuery(page=9, per_page=10).apply(rows)
    assert page.page == 3
    assert page.pages == 3
    assert [row['n'] for row in page.rows] == [20, 21, 22]
    assert (page.first_index, page.last_index) == (21, 23)


def test_empty_table():
    page = TableQuery().apply([])
    assert page.pages == 1
    assert page.first_index == 0
    assert page.last_index == 0
    assert page.rows == []


def test_invalid_page_size_falls_back_to_default():
    assert TableQuery(per_page=7).per_page == 10


def test_from_args():
    args = MultiDict({
        'q': 'acme', 'sort': 'monto', 'dir': 'desc', 'page': '2',
        'per_page': '25', 'f_status': 'APROBADO', 'f_cliente': ''
    })
    query = TableQuery.from_args(args, sortable=('monto',))
    assert query.search == 'acme'
    assert query.sort_key == 'monto'
    assert query.sort_direction == 'desc'
    assert query.page == 2
    assert query.per_page == 25
    assert query.column_filters == {'status': 'APROBADO'}


def test_from_args_ignores_unknown_sort_and_bad_numbers():
    query = TableQuery.from_args(MultiDict({'sort': 'password', 'page': 'x'}), sortable=('monto',))
    assert query.sort_key is None
    assert query.page == 1


def test_toggled():
    query = TableQuery(sort_key='monto')
    assert query.toggled('monto') == 'desc'
    assert query.toggled('cliente') == 'asc'


def test_page_window():
    assert page_window(1, 3) == [1, 2, 3]
    assert page_window(1, 10) == [1, 2, 3, 4, 5]
    assert page_window(6, 10) == [4, 5, 6, 7, 8]
    assert page_window(10, 10) == [6, 7, 8, 9, 10]


def test_to_dict():
    data = TableQuery(per_page=10).apply(ROWS).to_dict()
    assert data['total'] == 4
    assert data['page_numbers'] == [1]
    assert len(data['rows']) == 4
