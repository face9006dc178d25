import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from questionbank import models, repositories, services
from questionbank.errors import StoreError
from questionbank.schemas import QuestionIn
from questionbank.main import app

client = TestClient(app)


def _question(subject_id, **extra):
    q = {'title': 'Two sum', 'content': 'Find two numbers adding to target', 'subject_id': subject_id}
    q.update(extra)
    return q


def _create(questions):
    r = client.post('/api/questions', json=questions)
    assert r.status_code == 201, r.text
    return r.json()['inserted_ids']


def _tag(session, question_id, *tag_ids):
    session.add_all([models.QuestionTag(question_id=question_id, tag_id=t) for t in tag_ids])
    session.commit()


def test_create_then_get_returns_supplied_fields(catalog):
    payload = _question(catalog['Algorithms'], difficulty='easy', answer='hash map', code='def f(): pass')
    r = client.post('/api/questions', json=[payload])
    assert r.status_code == 201
    body = r.json()
    assert body['message'] == '1 questions created successfully'
    [qid] = body['inserted_ids']

    got = client.get(f'/api/questions/{qid}')
    assert got.status_code == 200
    assert got.json() == {
        'question_id': qid,
        'title': 'Two sum',
        'content': 'Find two numbers adding to target',
        'difficulty': 'easy',
        'answer': 'hash map',
        'code': 'def f(): pass',
        'subject': 'Algorithms',
    }


def test_bulk_create_returns_every_id(catalog):
    ids = _create([_question(catalog['Algorithms'], title=f'Q{i}') for i in range(3)])
    assert len(ids) == 3
    assert len(set(ids)) == 3


def test_falsy_optional_fields_are_stored_as_null(catalog):
    [qid] = _create([_question(catalog['Databases'], difficulty='', answer=None)])
    got = client.get(f'/api/questions/{qid}').json()
    assert got['difficulty'] is None
    assert got['answer'] is None
    assert got['code'] is None


def test_create_rejects_empty_and_non_array_bodies():
    for body in ([], {'title': 'x'}, 'text'):
        r = client.post('/api/questions', json=body)
        assert r.status_code == 400
        assert r.json() == {'message': 'Request body must be an array of questions'}


def test_create_rejects_incomplete_question(catalog, session):
    r = client.post('/api/questions', json=[_question(catalog['Algorithms']), {'title': 'no content'}])
    assert r.status_code == 400
    assert r.json()['message'] == 'Invalid question at index 1'
    assert session.exec(select(models.Question)).all() == []


def test_get_missing_question_returns_404():
    r = client.get('/api/questions/999')
    assert r.status_code == 404
    assert r.json() == {'message': 'Question not found'}


def test_list_paginates_by_subject_with_tags(catalog, session):
    algo = catalog['Algorithms']
    ids = _create([_question(algo, title=f'A{i}') for i in range(12)])
    _create([_question(catalog['Databases'], title='D0')])
    _tag(session, ids[5], catalog['arrays'], catalog['sorting'])
    _tag(session, ids[6], catalog['graphs'])

    r = client.get('/api/questions', params={'subject_id': algo, 'page': 2, 'limit': 5})
    assert r.status_code == 200
    rows = r.json()
    assert [row['question_id'] for row in rows] == ids[5:10]
    assert all(row['subject'] == 'Algorithms' for row in rows)
    assert set(rows[0]['tags'].split(',')) == {'arrays', 'sorting'}
    assert rows[1]['tags'] == 'graphs'
    assert rows[2]['tags'] is None

    last = client.get('/api/questions', params={'subject_id': algo, 'page': 3, 'limit': 5}).json()
    assert [row['question_id'] for row in last] == ids[10:]


def test_list_defaults_span_all_subjects(catalog):
    _create([_question(catalog['Algorithms'], title=f'A{i}') for i in range(8)])
    _create([_question(catalog['Databases'], title=f'D{i}') for i in range(4)])
    rows = client.get('/api/questions').json()
    assert len(rows) == 10
    assert {row['subject'] for row in rows} == {'Algorithms', 'Databases'}
    assert set(rows[0]) == {'question_id', 'title', 'content', 'difficulty', 'answer', 'code', 'subject', 'tags'}


def test_list_skips_questions_with_unknown_subject(catalog, session):
    session.add(models.Question(title='orphan', content='x', subject_id=4242))
    session.commit()
    _create([_question(catalog['Algorithms'])])
    rows = client.get('/api/questions').json()
    assert [row['title'] for row in rows] == ['Two sum']


def test_list_rejects_bad_pagination():
    for params in ({'page': 0}, {'limit': -1}, {'page': 'two'}):
        r = client.get('/api/questions', params=params)
        assert r.status_code == 400
    r = client.get('/api/questions', params={'subject_id': 'abc'})
    assert r.json() == {'message': 'subject_id must be an integer'}


def test_blank_query_values_use_defaults(catalog):
    _create([_question(catalog['Algorithms'])])
    r = client.get('/api/questions?subject_id=&page=&limit=')
    assert r.status_code == 200
    assert len(r.json()) == 1


def test_update_overwrites_all_fields(catalog):
    [qid] = _create([_question(catalog['Algorithms'], difficulty='easy', answer='a', code='c')])
    r = client.put(f'/api/questions/{qid}', json={
        'title': 'Joins', 'content': 'Explain joins', 'subject_id': catalog['Databases'],
        'difficulty': None, 'answer': None, 'code': None,
    })
    assert r.status_code == 200
    assert r.json() == {'message': 'Question updated successfully'}
    got = client.get(f'/api/questions/{qid}').json()
    assert got == {
        'question_id': qid, 'title': 'Joins', 'content': 'Explain joins',
        'difficulty': None, 'answer': None, 'code': None, 'subject': 'Databases',
    }


def test_update_missing_question_returns_404(catalog, session):
    r = client.put('/api/questions/999', json=_question(catalog['Algorithms']))
    assert r.status_code == 404
    assert r.json() == {'message': 'Question not found'}
    assert session.exec(select(models.Question)).all() == []


def test_update_rejects_incomplete_body(catalog):
    [qid] = _create([_question(catalog['Algorithms'])])
    r = client.put(f'/api/questions/{qid}', json={'title': 'only title'})
    assert r.status_code == 400
    assert r.json()['message'] == 'Invalid request'


def test_delete_then_get_returns_404(catalog, session):
    [qid] = _create([_question(catalog['Algorithms'])])
    _tag(session, qid, catalog['arrays'])
    r = client.delete(f'/api/questions/{qid}')
    assert r.status_code == 200
    assert r.json() == {'message': 'Question deleted successfully'}
    assert client.get(f'/api/questions/{qid}').status_code == 404
    links = session.exec(select(models.QuestionTag).where(models.QuestionTag.question_id == qid)).all()
    assert links == []


def test_delete_missing_question_returns_404():
    r = client.delete('/api/questions/999')
    assert r.status_code == 404
    assert r.json() == {'message': 'Question not found'}


def test_non_integer_id_is_rejected():
    r = client.get('/api/questions/abc')
    assert r.status_code == 400


def test_zero_and_false_optional_fields_are_stored_as_null(catalog):
    [qid] = _create([_question(catalog['Algorithms'], difficulty=0, answer=False, code='')])
    got = client.get(f'/api/questions/{qid}').json()
    assert got['difficulty'] is None
    assert got['answer'] is None
    assert got['code'] is None


def test_numeric_difficulty_is_kept_as_text(catalog):
    [qid] = _create([_question(catalog['Algorithms'], difficulty=3)])
    assert client.get(f'/api/questions/{qid}').json()['difficulty'] == '3'


def test_huge_page_is_rejected():
    r = client.get('/api/questions', params={'page': 10 ** 30})
    assert r.status_code == 400
    assert r.json() == {'message': 'page and limit are out of range'}


def _fail(*args, **kwargs):
    raise OperationalError('SQL', {}, Exception('connection lost'))


@pytest.mark.parametrize('method, repo_method, url, body, message', [
    ('get', 'list_with_tags', '/api/questions', None, 'Error fetching questions'),
    ('get', 'get_with_subject', '/api/questions/1', None, 'Error fetching question'),
    ('post', 'create_many', '/api/questions', [{'title': 't', 'content': 'c', 'subject_id': 1}], 'Error creating questions'),
    ('put', 'replace', '/api/questions/1', {'title': 't', 'content': 'c', 'subject_id': 1}, 'Error updating question'),
    ('delete', 'delete', '/api/questions/1', None, 'Error deleting question'),
])
def test_store_failures_return_500(monkeypatch, method, repo_method, url, body, message):
    monkeypatch.setattr(repositories.QuestionRepository, repo_method, _fail)
    kwargs = {'json': body} if body is not None else {}
    r = client.request(method.upper(), url, **kwargs)
    assert r.status_code == 500
    assert r.json()['message'] == message
    assert 'connection lost' in r.json()['error']


@pytest.mark.parametrize('call', [
    lambda svc: svc.list_questions(),
    lambda svc: svc.get_question(1),
    lambda svc: svc.create_questions([{'title': 't', 'content': 'c', 'subject_id': 1}]),
    lambda svc: svc.update_question(1, QuestionIn(title='t', content='c', subject_id=1)),
    lambda svc: svc.delete_question(1),
])
def test_store_failures_roll_back_the_session(session, monkeypatch, call):
    for name in ('list_with_tags', 'get_with_subject', 'create_many', 'replace', 'delete'):
        monkeypatch.setattr(repositories.QuestionRepository, name, _fail)
    rollbacks = []
    monkeypatch.setattr(session, 'rollback', lambda: rollbacks.append(True))
    with pytest.raises(StoreError):
        call(services.QuestionService(session))
    assert rollbacks == [True]
