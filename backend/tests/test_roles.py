"""Tests for admin role toggling and its audit trail."""

import pytest

from canteen.core.exceptions import SelfDemotionForbidden
from canteen.core.rbac import UserRole
from canteen.models.audit import AdminRoleAudit
from canteen.services.role_service import RoleService


class TestRoleService:
    def test_promote_and_demote(self, db_session, employee_user, admin_actor):
        service = RoleService(db_session)

        promoted = service.toggle_role(employee_user.id, admin_actor)
        db_session.refresh(employee_user)
        assert (promoted.previous_role, promoted.new_role) == ("employee", "admin")
        assert employee_user.role == UserRole.ADMIN

        demoted = service.toggle_role(employee_user.id, admin_actor)
        db_session.refresh(employee_user)
        assert (demoted.previous_role, demoted.new_role) == ("admin", "employee")
        assert employee_user.role == UserRole.EMPLOYEE
        assert db_session.query(AdminRoleAudit).count() == 2

    def test_admin_cannot_demote_self(self, db_session, admin_user, admin_actor):
        with pytest.raises(SelfDemotionForbidden):
            RoleService(db_session).toggle_role(admin_user.id, admin_actor)
        db_session.refresh(admin_user)
        assert admin_user.role == UserRole.ADMIN
        assert db_session.query(AdminRoleAudit).count() == 0


class TestRoleEndpoints:
    def test_toggle_and_audit(self, client, admin_headers, admin_user, employee_user):
        response = client.post(f"/api/v1/roles/users/{employee_user.id}/toggle", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["new_role"] == "admin"
        assert response.json()["changed_by"] == admin_user.id

        audit = client.get("/api/v1/roles/audit", headers=admin_headers)
        assert [a["user_id"] for a in audit.json()] == [employee_user.id]

    def test_self_demotion_rejected(self, client, admin_headers, admin_user):
        response = client.post(f"/api/v1/roles/users/{admin_user.id}/toggle", headers=admin_headers)
        assert response.status_code == 400

    def test_unknown_user(self, client, admin_headers):
        assert client.post("/api/v1/roles/users/999/toggle", headers=admin_headers).status_code == 404

    def test_promoted_user_gains_admin_access(self, client, admin_headers, employee_user, employee_headers):
        assert client.get("/api/v1/roles/users", headers=employee_headers).status_code == 403
        client.post(f"/api/v1/roles/users/{employee_user.id}/toggle", headers=admin_headers)
        users = client.get("/api/v1/roles/users", headers=employee_headers)
        assert users.status_code == 200
        assert {u["email"] for u in users.json()} == {"admin@canteen.io", "ravi@canteen.io"}
