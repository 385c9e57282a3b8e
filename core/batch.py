# core/batch.py - Save a table of edited rows in one request
"""
Admin tables keep edited rows locally and flag them:

    _isNew    row was added in the table and has no stored record yet
    _dirty    row was edited since it was loaded
    _deleted  row was removed in the table

On save the rows are applied in three passes (deletes, then creates, then
updates). A failing row is counted and reported but never stops the other
rows from being saved.
"""
import logging

logger = logging.getLogger(__name__)

ROW_FLAGS = ('_dirty', '_isNew', '_deleted')


def strip_flags(row):
    """Copy of a row without the table flags and without a placeholder id"""
    data = {key: value for key, value in row.items() if key not in ROW_FLAGS}
    if row.get('_isNew'):
        data.pop('id', None)
    return data


def rows_to_delete(rows):
    return [r for r in rows if r.get('_deleted') and not r.get('_isNew') and r.get('id')]


def rows_to_create(rows):
    return [r for r in rows if r.get('_isNew') and not r.get('_deleted')]


def rows_to_update(rows):
    return [
        r for r in rows
        if r.get('_dirty') and not r.get('_isNew') and not r.get('_deleted')
    ]


class BatchResult:
    """Outcome of a batch save"""

    def __init__(self):
        self.created = []
        self.updated = []
        self.deleted = []
        self.errors = []

    @property
    def failed(self):
        return len(self.errors)

    @property
    def message(self):
        if self.failed == 0:
            return 'Saved'
        return f'{self.failed} operation(s) failed'

    def record_error(self, row, action, error):
        self.errors.append({
            'id': row.get('id'),
            'action': action,
            'error': error,
        })

    def to_dict(self):
        return {
            'created': len(self.created),
            'updated': len(self.updated),
            'deleted': len(self.deleted),
            'failed': self.failed,
            'errors': self.errors,
            'message': self.message,
        }


def _error_text(exc):
    detail = getattr(exc, 'detail', None)
    if detail is not None:
        return detail
    return str(exc)


def apply_row_changes(rows, create, update, delete):
    """Apply flagged table rows with the given callbacks.

    create(data) and update(row_id, data) receive the row without flags;
    delete(row_id) receives the stored id. Callbacks raise to signal a
    failed row.
    """
    result = BatchResult()

    for row in rows_to_delete(rows):
        try:
            delete(row['id'])
            result.deleted.append(row['id'])
        except Exception as e:
            logger.warning("Batch delete failed for %s: %s", row.get('id'), e)
            result.record_error(row, 'delete', _error_text(e))

    for row in rows_to_create(rows):
        try:
            result.created.append(create(strip_flags(row)))
        except Exception as e:
            logger.warning("Batch create failed: %s", e)
            result.record_error(row, 'create', _error_text(e))

    for row in rows_to_update(rows):
        try:
            result.updated.append(update(row['id'], strip_flags(row)))
        except Exception as e:
            logger.warning("Batch update failed for %s: %s", row.get('id'), e)
            result.record_error(row, 'update', _error_text(e))

    if result.failed:
        logger.info("Batch save finished with %d failure(s)", result.failed)
    return result
