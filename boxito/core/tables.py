"""
Table query engine
Global search, column filters, sorting and pagination for list pages
"""
import math

from boxito.config.settings import BoxitoConfig


def contains(value, needle):
    """Case-insensitive substring match; empty needle matches everything"""
    if not needle:
        return True
    if value is None:
        value = ''
    return str(needle).strip().lower() in str(value).lower()


def as_number(value):
    """Numeric value of a cell, 0 for blanks and text"""
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _sort_key(value):
    # None first, then numbers, then text; keeps mixed columns sortable
    if value is None or value == '':
        return (0, 0, '')
    if isinstance(value, bool):
        return (1, int(value), '')
    if isinstance(value, (int, float)):
        return (1, value, '')
    return (2, 0, str(value).lower())


def page_window(current, pages, size=BoxitoConfig.TABLE_PAGE_WINDOW):
    """Page numbers shown around the current page"""
    if pages <= size:
        return list(range(1, pages + 1))
    half = size // 2
    if current <= half + 1:
        start = 1
    elif current >= pages - half:
        start = pages - size + 1
    else:
        start = current - half
    return list(range(start, start + size))


class TablePage:
    """One page of query results"""

    def __init__(self, rows, total, page, per_page):
        self.rows = rows
        self.total = total
        self.page = page
        self.per_page = per_page
        self.pages = max(1, math.ceil(total / per_page)) if per_page else 1

    @property
    def first_index(self):
        return 0 if self.total == 0 else (self.page - 1) * self.per_page + 1

    @property
    def last_index(self):
        return min(self.page * self.per_page, self.total)

    @property
    def page_numbers(self):
        return page_window(self.page, self.pages)

    def to_dict(self):
        return {
            'rows': self.rows,
            'total': self.total,
            'page': self.page,
            'pages': self.pages,
            'per_page': self.per_page,
            'first_index': self.first_index,
            'last_index': self.last_index,
            'page_numbers': self.page_numbers,
        }


class TableQuery:
    """Search/filter/sort/paginate state of a table"""

    RESERVED_ARGS = ('q', 'sort', 'dir', 'page', 'per_page')

    def __init__(self, search='', column_filters=None, sort_key=None,
                 sort_direction='asc', page=1, per_page=BoxitoConfig.TABLE_DEFAULT_PAGE_SIZE):
        self.search = search or ''
        self.column_filters = column_filters or {}
        self.sort_key = sort_key or None
        self.sort_direction = 'desc' if sort_direction == 'desc' else 'asc'
        self.page = page
        if per_page not in BoxitoConfig.TABLE_PAGE_SIZES:
            per_page = BoxitoConfig.TABLE_DEFAULT_PAGE_SIZE
        self.per_page = per_page

    @classmethod
    def from_args(cls, args, sortable=None):
        """Build a query from request args

        Column filters are passed as f_<column>=<text>.
        """
        def to_int(name, default):
            try:
                return int(args.get(name, default))
            except (TypeError, ValueError):
                return default

        sort_key = args.get('sort') or None
        if sortable is not None and sort_key not in sortable:
            sort_key = None

        column_filters = {
            key[2:]: value
            for key, value in args.items()
            if key.startswith('f_') and value
        }

        return cls(
            search=args.get('q', ''),
            column_filters=column_filters,
            sort_key=sort_key,
            sort_direction=args.get('dir', 'asc'),
            page=to_int('page', 1),
            per_page=to_int('per_page', BoxitoConfig.TABLE_DEFAULT_PAGE_SIZE)
        )

    def matches(self, row):
        if self.search and not any(contains(value, self.search) for value in row.values()):
            return False
        return all(contains(row.get(key), value) for key, value in self.column_filters.items())

    def apply(self, rows):
        """Filter, sort and cut the current page"""
        filtered = [row for row in rows if self.matches(row)]

        if self.sort_key:
            filtered = sorted(
                filtered,
                key=lambda row: _sort_key(row.get(self.sort_key)),
                reverse=self.sort_direction == 'desc'
            )

        total = len(filtered)
        pages = max(1, math.ceil(total / self.per_page))
        page = min(max(1, self.page), pages)
        start = (page - 1) * self.per_page

        return TablePage(filtered[start:start + self.per_page], total, page, self.per_page)

    def toggled(self, key):
        """Direction a click on column `key` would apply"""
        if self.sort_key == key and self.sort_direction == 'asc':
            return 'desc'
        return 'asc'
