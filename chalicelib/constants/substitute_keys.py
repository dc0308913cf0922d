# Keys renamed on the way to the db (reserved words) and back to the UI.
# A key mapped to None is dropped.
to_db = {
    'id': 'id_',
    'name': 'name_'
}

from_db = {
    'id_': 'id',
    'name_': 'name',
    'partkey': None,
    'sortkey': None,
    'record_type': None,
    'password_hash': None
}
