import sqlite3

import pytest

from solar_calculator.contacts import (
    ContactSubmissionData,
    MemoryContactRepository,
    SQLiteContactRepository,
    Topic,
    get_contact_repository,
    submit_contact_form,
)


def form(**overrides):
    data = {
        'full_name': 'Dana Rivera',
        'email': 'dana@example.com',
        'phone': '',
        'company': 'Rivera Logistics',
        'topic': 'PROPOSAL',
        'message': 'Please send a proposal for our warehouse roof.',
        'calculator_context': '{"inputs": {}, "results": {}}',
        'consent': True,
    }
    data.update(overrides)
    return data


@pytest.fixture(params=['memory', 'sqlite'])
def repository(request, tmp_path):
    if request.param == 'memory':
        return MemoryContactRepository()
    return SQLiteContactRepository(str(tmp_path / 'contacts.db'))


# ---- Validation ----

def test_valid_submission_data():
    data = ContactSubmissionData(**form())

    assert data.topic is Topic.PROPOSAL
    assert data.phone is None
    assert data.company == 'Rivera Logistics'


@pytest.mark.parametrize("field, value, message", [
    ('full_name', 'D', 'Full name must be at least 2 characters'),
    ('email', 'not-an-email', 'Please enter a valid email address'),
    ('topic', 'SALES', 'Please select a valid topic'),
    ('message', 'Hi', 'Message must be at least 10 characters'),
    ('consent', False, 'You must consent to data processing'),
])
def test_field_errors(field, value, message):
    state = submit_contact_form(form(**{field: value}), MemoryContactRepository())

    assert not state.success
    assert state.error == 'Please correct the errors below'
    assert state.field_errors == {field: [message]}


def test_multiple_field_errors():
    state = submit_contact_form(form(full_name='', message='short'), MemoryContactRepository())
    assert set(state.field_errors) == {'full_name', 'message'}


# ---- Submission ----

def test_submit_stores_lead():
    repo = MemoryContactRepository()
    state = submit_contact_form(form(), repo)

    assert state.success
    assert state.error is None
    stored = repo.find_all()
    assert len(stored) == 1
    assert stored[0].calculator_context == '{"inputs": {}, "results": {}}'


def test_submit_reports_storage_failure():
    class BrokenRepository(MemoryContactRepository):
        def create(self, data):
            raise sqlite3.OperationalError("database is locked")

    state = submit_contact_form(form(), BrokenRepository())

    assert not state.success
    assert state.error == 'An error occurred while submitting your message. Please try again.'


# ---- Repositories ----

def test_create_and_find(repository):
    created = repository.create(ContactSubmissionData(**form()))

    found = repository.find_by_id(created.id)
    assert found == created
    assert found.topic is Topic.PROPOSAL
    assert found.phone is None
    assert found.consent is True


def test_find_missing(repository):
    assert repository.find_by_id('missing') is None


def test_find_all_newest_first(repository):
    first = repository.create(ContactSubmissionData(**form()))
    second = repository.create(ContactSubmissionData(**form(email='lee@example.com')))

    assert [s.id for s in repository.find_all()] == [second.id, first.id]


def test_find_by_email(repository):
    first = repository.create(ContactSubmissionData(**form()))
    repository.create(ContactSubmissionData(**form(email='lee@example.com')))
    third = repository.create(ContactSubmissionData(**form(topic='STORAGE')))

    found = repository.find_by_email('dana@example.com')
    assert [s.id for s in found] == [third.id, first.id]


def test_delete(repository):
    created = repository.create(ContactSubmissionData(**form()))

    assert repository.delete(created.id) is True
    assert repository.find_by_id(created.id) is None
    assert repository.delete(created.id) is False


def test_memory_ids_are_sequential():
    repo = MemoryContactRepository()
    assert repo.create(ContactSubmissionData(**form())).id == 'mem_1'
    assert repo.create(ContactSubmissionData(**form())).id == 'mem_2'


def test_sqlite_persists_across_instances(tmp_path):
    db_path = str(tmp_path / 'contacts.db')
    created = SQLiteContactRepository(db_path).create(ContactSubmissionData(**form()))

    assert SQLiteContactRepository(db_path).find_by_id(created.id) == created


def test_get_contact_repository(tmp_path):
    assert isinstance(get_contact_repository(), MemoryContactRepository)
    assert isinstance(get_contact_repository(str(tmp_path / 'c.db')), SQLiteContactRepository)
