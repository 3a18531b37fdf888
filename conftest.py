# conftest.py

import os
from unittest.mock import patch

import pytest
from werkzeug.security import generate_password_hash

# Set testing environment BEFORE importing app so app.py picks TestingConfig
os.environ["FLASK_ENV"] = "testing"

from app import app as flask_app  # noqa: E402
from ats_app.models import (  # noqa: E402
    Document,
    HiringManager,
    HiringManagerNote,
    Job,
    JobSeeker,
    JobSeekerNote,
    Lead,
    Organization,
    Placement,
    RecordStatus,
    Task,
    User,
    db,
)
from ats_app.utils.permissions import Actor  # noqa: E402


@pytest.fixture(scope="function")
def app():
    """Create and configure a test Flask application with a fresh schema"""
    original_config = dict(flask_app.config)
    flask_app.config.update(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret-key-for-testing-only",
            "MONITORING_ENABLED": False,
            "ERROR_ALERTING_ENABLED": False,
            "MAIL_SUPPRESS_SEND": True,
            "EMAIL_VALIDATION_CHECK_DELIVERABILITY": False,  # Skip DNS checks in tests
            "TRANSFER_REVIEWER_EMAIL": "reviewer@example.com",
            "FRONTEND_URL": "http://frontend.test",
            "ARCHIVE_CLEANUP_DELAY_DAYS": 7,
            "TRANSFER_PROFILE_PATH": None,
        }
    )

    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()

    # Tests tweak app.config freely; restore it for the next one
    flask_app.config.clear()
    flask_app.config.update(original_config)


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    return app.test_client()


@pytest.fixture
def test_user(app):
    """A persisted recruiter account"""
    user = User(
        username="testuser",
        email="test@example.com",
        password_hash=generate_password_hash("testpass123"),
        first_name="Test",
        last_name="User",
        is_active=True,
        is_super_admin=False,
    )
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def reviewer_user(app):
    """A persisted reviewer account"""
    user = User(
        username="reviewer",
        email="payroll@example.com",
        password_hash=generate_password_hash("reviewpass123"),
        first_name="Pat",
        last_name="Reviewer",
        is_active=True,
        is_super_admin=True,
    )
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def actor(test_user):
    return Actor.from_user(test_user)


@pytest.fixture
def reviewer(reviewer_user):
    return Actor.from_user(reviewer_user)


@pytest.fixture
def logged_in_user(client, test_user):
    """Client with an authenticated session for test_user"""
    client.post("/login", data={"username": "testuser", "password": "testpass123"})
    return client, test_user


@pytest.fixture
def organizations(app):
    """A duplicate source organization and the target it should merge into"""
    source = Organization(
        name="Acme Corp (dup)",
        record_number="ORG-1001",
        contact_phone="",
        address="123 Main",
        website="https://acme.example.com",
        custom_fields={"Industry": "Tech", "Region": "West"},
    )
    target = Organization(
        name="Acme Corporation",
        record_number="ORG-1002",
        contact_phone="555-1111",
        address="",
        custom_fields={"Industry": "Finance", "Size": "50"},
    )
    db.session.add_all([source, target])
    db.session.commit()
    return source, target


@pytest.fixture
def organization_dependents(organizations):
    """Hiring manager, job, lead and documents attached to the source organization"""
    source, target = organizations
    hiring_manager = HiringManager(organization_id=source.id, first_name="Jane", last_name="Doe")
    db.session.add(hiring_manager)
    db.session.flush()

    job = Job(title="Backend Engineer", organization_id=source.id, hiring_manager_id=hiring_manager.id)
    lead = Lead(name="Q3 expansion", organization_id=source.id)
    org_document = Document(entity_type="organization", entity_id=source.id, document_name="msa.pdf")
    # Same id under another entity type must not move
    other_document = Document(entity_type="job", entity_id=source.id, document_name="jd.pdf")
    db.session.add_all([job, lead, org_document, other_document])
    db.session.commit()
    return {
        "hiring_manager": hiring_manager,
        "job": job,
        "lead": lead,
        "org_document": org_document,
        "other_document": other_document,
    }


@pytest.fixture
def hiring_managers(organizations):
    """A duplicate hiring manager at the source organization and its target at the target organization"""
    source_org, target_org = organizations
    source = HiringManager(
        organization_id=source_org.id,
        first_name="Sam",
        last_name="Smith",
        record_number="HM-2001",
        email="sam.smith@example.com",
        phone="",
        title="VP Engineering",
        custom_fields='{"Preferred Contact": "Email"}',
    )
    target = HiringManager(
        organization_id=target_org.id,
        first_name="Samuel",
        last_name="Smith",
        record_number="HM-2002",
        phone="555-2222",
        title="",
        custom_fields=None,
    )
    db.session.add_all([source, target])
    db.session.commit()
    return source, target


@pytest.fixture
def hiring_manager_dependents(hiring_managers, test_user):
    source, target = hiring_managers
    note = HiringManagerNote(hiring_manager_id=source.id, text="Met at career fair", created_by=test_user.id)
    document = Document(entity_type="hiring_manager", entity_id=source.id, document_name="card.png")
    job = Job(title="Data Engineer", organization_id=source.organization_id, hiring_manager_id=source.id)
    task = Task(title="Send intake form", hiring_manager_id=source.id)
    db.session.add_all([note, document, job, task])
    db.session.commit()
    return {"note": note, "document": document, "job": job, "task": task}


@pytest.fixture
def job_seekers(app):
    """Two profiles of the same candidate, each with an application history"""
    source = JobSeeker(
        first_name="Alex",
        last_name="Rivera",
        record_number="JS-3001",
        email="alex@example.com",
        custom_fields={"applications": [{"job_id": 7, "status": "Submitted"}], "Source": "Referral"},
    )
    target = JobSeeker(
        first_name="Alexander",
        last_name="Rivera",
        record_number="JS-3002",
        phone="555-3333",
        custom_fields={"applications": [{"job_id": 3, "status": "Interview"}]},
    )
    db.session.add_all([source, target])
    db.session.commit()
    return source, target


@pytest.fixture
def job_seeker_dependents(job_seekers, test_user):
    source, target = job_seekers
    job = Job(title="QA Analyst")
    db.session.add(job)
    db.session.flush()
    note = JobSeekerNote(job_seeker_id=source.id, text="Prefers remote", created_by=test_user.id)
    document = Document(entity_type="job_seeker", entity_id=source.id, document_name="resume.pdf")
    other_document = Document(entity_type="organization", entity_id=source.id, document_name="contract.pdf")
    task = Task(title="Reference check", job_seeker_id=source.id)
    placement = Placement(job_id=job.id, job_seeker_id=source.id)
    db.session.add_all([note, document, other_document, task, placement])
    db.session.commit()
    return {
        "note": note,
        "document": document,
        "other_document": other_document,
        "task": task,
        "placement": placement,
    }


@pytest.fixture
def archived_organization(app):
    org = Organization(name="Old Acme", record_number="ORG-0999", status=RecordStatus.ARCHIVED)
    db.session.add(org)
    db.session.commit()
    return org


@pytest.fixture
def mock_mailer():
    """Capture outbound transfer emails instead of sending them"""
    with patch("ats_app.services.transfer_notifications.send_mail") as mock_send:
        mock_send.return_value = True
        yield mock_send


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers and ensure testing environment"""
    os.environ["FLASK_ENV"] = "testing"

    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
