"""
Tests for student sign-in.

These tests cover:
- Login by registration email and by account identifier
- Temporary and permanent passwords
- Refusal of unknown logins, wrong passwords and INACTIVE accounts
"""

import pytest

from admissions.modules.applications.errors import AccountInactiveError, LoginFailedError
from admissions.modules.applications.models import ApplicationStatus
from admissions.modules.applications.schemas import ApplicationRegister
from admissions.modules.applications.service import (
    authenticate_student,
    complete_password_change,
    deactivate_application,
    decide_application,
    register_applicant,
    submit_application,
)


async def _register(db_session, email: str = "lea@mail.com"):
    return await register_applicant(
        db_session,
        ApplicationRegister(
            first_name="lea",
            last_name="santos",
            email=email,
            password="chosen-pass-1",
        ),
    )


class TestAuthenticateStudent:
    @pytest.mark.asyncio
    async def test_login_by_email_before_approval(self, db_session):
        application = await _register(db_session)

        signed_in = await authenticate_student(db_session, "  LEA@mail.com ", "chosen-pass-1")

        assert signed_in.id == application.id
        assert signed_in.status == ApplicationStatus.REGISTERED

    @pytest.mark.asyncio
    async def test_login_by_account_identifier_with_temporary_password(
        self, db_session, make_application, admin_principal
    ):
        application = await make_application(status=ApplicationStatus.PENDING)
        approved = await decide_application(
            db_session, application.id, "APPROVED", admin_principal
        )

        signed_in = await authenticate_student(
            db_session, approved.account_identifier, approved.temporary_password
        )

        assert signed_in.id == application.id
        assert signed_in.temp_password_active is True

    @pytest.mark.asyncio
    async def test_temporary_password_stops_working_after_change(
        self, db_session, admin_principal, student_for
    ):
        application = await _register(db_session)
        await submit_application(db_session, application.id, student_for(application.id))
        approved = await decide_application(
            db_session, application.id, "APPROVED", admin_principal
        )
        await complete_password_change(
            db_session,
            application.id,
            student_for(application.id),
            approved.temporary_password,
            "my-permanent-pass",
        )

        with pytest.raises(LoginFailedError):
            await authenticate_student(
                db_session, approved.account_identifier, approved.temporary_password
            )

        signed_in = await authenticate_student(
            db_session, approved.account_identifier, "my-permanent-pass"
        )
        assert signed_in.id == application.id
        assert signed_in.temp_password_active is False

    @pytest.mark.asyncio
    async def test_wrong_password(self, db_session):
        await _register(db_session)

        with pytest.raises(LoginFailedError) as exc_info:
            await authenticate_student(db_session, "lea@mail.com", "not-my-pass")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("login", ["nobody@mail.com", "25-0001-001", "not-an-identifier"])
    async def test_unknown_login(self, db_session, login):
        await _register(db_session)

        with pytest.raises(LoginFailedError):
            await authenticate_student(db_session, login, "chosen-pass-1")

    @pytest.mark.asyncio
    async def test_inactive_student_is_refused(
        self, db_session, make_application, admin_principal
    ):
        application = await make_application(status=ApplicationStatus.PENDING)
        approved = await decide_application(
            db_session, application.id, "APPROVED", admin_principal
        )
        await deactivate_application(db_session, application.id, admin_principal)

        with pytest.raises(AccountInactiveError) as exc_info:
            await authenticate_student(
                db_session, approved.account_identifier, approved.temporary_password
            )

        assert exc_info.value.status_code == 403
        assert exc_info.value.error_code == "ACCOUNT_INACTIVE"

    @pytest.mark.asyncio
    async def test_inactive_student_with_wrong_password_gets_generic_error(
        self, db_session, make_application, admin_principal
    ):
        application = await make_application(status=ApplicationStatus.PENDING)
        approved = await decide_application(
            db_session, application.id, "APPROVED", admin_principal
        )
        await deactivate_application(db_session, application.id, admin_principal)

        with pytest.raises(LoginFailedError):
            await authenticate_student(db_session, approved.account_identifier, "guess")
