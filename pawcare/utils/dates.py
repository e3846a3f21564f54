from datetime import date, datetime

from pawcare.errors import ValidationError

DATE_FORMAT = '%Y-%m-%d'


def parse_date(value, field='date'):
    """Parse a YYYY-MM-DD string. Empty values map to None."""
    if value is None or value == '':
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    try:
        # Accept full ISO timestamps by keeping the date part
        return datetime.strptime(str(value)[:10], DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f'Invalid date format for {field}. Use YYYY-MM-DD')
