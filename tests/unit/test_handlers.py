"""Tool handlers against a mocked Zitadel client."""
from unittest.mock import MagicMock

import pytest

from zitadel_mcp.core.zitadel.exceptions import ValidationError
from zitadel_mcp.tools import applications, organizations, projects, roles, service_accounts, users, utility
from zitadel_mcp.tools.base import HandlerContext


@pytest.fixture()
def request_mock(ctx):
    return ctx.client.request


class TestUserHandlers:
    def test_list_users(self, ctx, request_mock):
        request_mock.return_value = {
            "result": [
                {
                    "userId": "u1",
                    "username": "jane",
                    "state": "USER_STATE_ACTIVE",
                    "human": {
                        "profile": {"givenName": "Jane", "familyName": "Doe"},
                        "email": {"email": "jane@test.com"},
                    },
                }
            ],
            "details": {"totalResult": 1},
        }

        result = users.list_users({}, ctx)

        assert not result.is_error
        assert "Found 1 user(s)" in result.text
        assert "- Jane Doe (jane@test.com) [ACTIVE] ID: u1" in result.text
        request_mock.assert_called_once_with(
            "/v2/users", method="POST", json={"query": {"offset": "0", "limit": 50}}
        )

    def test_list_users_email_filter(self, ctx, request_mock):
        request_mock.return_value = {"result": []}

        users.list_users({"query": "jane", "limit": 10}, ctx)

        body = request_mock.call_args.kwargs["json"]
        assert body["query"]["limit"] == 10
        assert body["queries"][0]["emailQuery"]["emailAddress"] == "jane"

    def test_list_users_empty(self, ctx, request_mock):
        request_mock.return_value = {"result": []}
        assert users.list_users({}, ctx).text == "No users found."

    @pytest.mark.parametrize("limit", [0, 501])
    def test_list_users_limit_bounds(self, ctx, limit):
        with pytest.raises(ValidationError):
            users.list_users({"limit": limit}, ctx)

    def test_get_user(self, ctx, request_mock):
        request_mock.return_value = {
            "userId": "u1",
            "username": "jane",
            "state": "USER_STATE_ACTIVE",
            "human": {
                "profile": {"givenName": "Jane", "familyName": "Doe"},
                "email": {"email": "jane@test.com", "isEmailVerified": True},
            },
            "loginNames": ["jane@test.zitadel.cloud"],
            "details": {"creationDate": "2025-01-01T00:00:00Z"},
        }

        text = users.get_user({"userId": "u1"}, ctx).text

        assert "User: Jane Doe" in text
        assert "Email: jane@test.com" in text
        assert "Email Verified: true" in text
        assert "Login Names: jane@test.zitadel.cloud" in text
        request_mock.assert_called_once_with("/v2/users/u1")

    def test_get_user_nested_response(self, ctx, request_mock):
        request_mock.return_value = {"user": {"userId": "u1", "username": "machine-1", "state": "USER_STATE_INACTIVE"}}

        text = users.get_user({"userId": "u1"}, ctx).text

        assert "User: machine-1" in text
        assert "State: INACTIVE" in text

    def test_get_user_requires_id(self, ctx):
        with pytest.raises(ValidationError, match="userId is required"):
            users.get_user({}, ctx)

    def test_get_user_rejects_traversal(self, ctx, request_mock):
        with pytest.raises(ValidationError, match="alphanumeric"):
            users.get_user({"userId": "../admin"}, ctx)
        request_mock.assert_not_called()

    def test_create_user(self, ctx, request_mock):
        request_mock.return_value = {"userId": "new-u1"}

        text = users.create_user({"email": "new@test.com", "firstName": "New", "lastName": "User"}, ctx).text

        assert "User ID: new-u1" in text
        assert "invitation email" in text
        body = request_mock.call_args.kwargs["json"]
        assert body["profile"] == {"givenName": "New", "familyName": "User"}
        assert body["email"]["email"] == "new@test.com"

    def test_create_user_invalid_email(self, ctx, request_mock):
        with pytest.raises(ValidationError):
            users.create_user({"email": "not-an-email", "firstName": "A", "lastName": "B"}, ctx)
        request_mock.assert_not_called()

    def test_deactivate_user(self, ctx, request_mock):
        request_mock.return_value = {}

        result = users.deactivate_user({"userId": "u1"}, ctx)

        assert "deactivated" in result.text
        request_mock.assert_called_once_with("/v2/users/u1/deactivate", method="POST")

    def test_reactivate_user(self, ctx, request_mock):
        request_mock.return_value = {}

        result = users.reactivate_user({"userId": "u1"}, ctx)

        assert "reactivated" in result.text
        request_mock.assert_called_once_with("/v2/users/u1/reactivate", method="POST")


class TestProjectHandlers:
    def test_list_projects(self, ctx, request_mock):
        request_mock.return_value = {"result": [{"id": "p1", "name": "My Project", "state": "PROJECT_STATE_ACTIVE"}]}

        text = projects.list_projects({}, ctx).text

        assert "- My Project [ACTIVE] ID: p1" in text

    def test_list_projects_missing_state(self, ctx, request_mock):
        request_mock.return_value = {"result": [{"id": "p1", "name": "My Project"}]}
        assert "[UNKNOWN]" in projects.list_projects({}, ctx).text

    def test_get_project(self, ctx, request_mock):
        request_mock.return_value = {
            "project": {"id": "p1", "name": "Portal", "state": "PROJECT_STATE_ACTIVE", "projectRoleAssertion": True}
        }

        text = projects.get_project({"projectId": "p1"}, ctx).text

        assert "Project: Portal" in text
        assert "Role Assertion: true" in text
        assert "Role Check: N/A" in text

    def test_create_project_defaults(self, ctx, request_mock):
        request_mock.return_value = {"id": "p-new"}

        text = projects.create_project({"name": "New"}, ctx).text

        assert "Project ID: p-new" in text
        request_mock.assert_called_once_with(
            "/management/v1/projects",
            method="POST",
            json={"name": "New", "projectRoleAssertion": True, "projectRoleCheck": False},
        )


class TestApplicationHandlers:
    def test_create_oidc_app(self, ctx, request_mock):
        request_mock.return_value = {"appId": "app-1", "clientId": "client-123", "clientSecret": "secret-abc"}

        text = applications.create_oidc_app(
            {"projectId": "p1", "name": "Test App", "redirectUris": ["https://app.test/callback"]}, ctx
        ).text

        assert "Client ID: client-123" in text
        assert "secret-abc" in text
        assert "WARNING" in text

        path = request_mock.call_args.args[0]
        body = request_mock.call_args.kwargs["json"]
        assert path == "/management/v1/projects/p1/apps/oidc"
        assert body["responseTypes"] == ["OIDC_RESPONSE_TYPE_CODE"]
        assert body["grantTypes"] == ["OIDC_GRANT_TYPE_AUTHORIZATION_CODE"]
        assert body["appType"] == "OIDC_APP_TYPE_WEB"
        assert body["authMethodType"] == "OIDC_AUTH_METHOD_TYPE_NONE"
        assert body["devMode"] is False
        assert "postLogoutRedirectUris" not in body

    def test_create_public_client_has_no_secret_warning(self, ctx, request_mock):
        request_mock.return_value = {"appId": "app-1", "clientId": "client-123"}

        text = applications.create_oidc_app(
            {"projectId": "p1", "name": "SPA", "redirectUris": ["https://app.test/cb"]}, ctx
        ).text

        assert "WARNING" not in text

    @pytest.mark.parametrize(
        "params",
        [
            {"projectId": "p1", "name": "Test", "redirectUris": ["not-a-url"]},
            {"projectId": "p1", "name": "Test", "redirectUris": []},
            {"projectId": "p1", "name": "Test"},
            {"projectId": "p1", "name": "Test", "redirectUris": ["https://a/cb"], "appType": "SAML"},
            {"projectId": "p/1", "name": "Test", "redirectUris": ["https://a/cb"]},
        ],
    )
    def test_create_oidc_app_rejects_bad_input(self, ctx, request_mock, params):
        with pytest.raises(ValidationError):
            applications.create_oidc_app(params, ctx)
        request_mock.assert_not_called()

    def test_list_apps(self, ctx, request_mock):
        request_mock.return_value = {
            "result": [{"id": "a1", "name": "Web", "state": "APP_STATE_ACTIVE", "oidcConfig": {"clientId": "c1"}}]
        }

        text = applications.list_apps({"projectId": "p1"}, ctx).text

        assert "- Web [ACTIVE] Client ID: c1 | App ID: a1" in text

    def test_list_apps_empty(self, ctx, request_mock):
        request_mock.return_value = {}
        assert applications.list_apps({"projectId": "p1"}, ctx).text == "No applications found in this project."

    def test_get_app(self, ctx, request_mock):
        request_mock.return_value = {
            "app": {
                "id": "a1",
                "name": "Web",
                "state": "APP_STATE_ACTIVE",
                "oidcConfig": {"clientId": "c1", "redirectUris": ["https://a/cb"], "devMode": True},
            }
        }

        text = applications.get_app({"projectId": "p1", "appId": "a1"}, ctx).text

        assert "Client ID: c1" in text
        assert "Redirect URIs: https://a/cb" in text
        assert "Dev Mode: true" in text
        request_mock.assert_called_once_with("/management/v1/projects/p1/apps/a1")

    def test_update_app_sends_only_given_fields(self, ctx, request_mock):
        request_mock.return_value = {}

        applications.update_app({"projectId": "p1", "appId": "a1", "devMode": True}, ctx)

        request_mock.assert_called_once_with(
            "/management/v1/projects/p1/apps/a1/oidc", method="PUT", json={"devMode": True}
        )


class TestRoleHandlers:
    def test_list_roles_uses_default_project(self, ctx, request_mock):
        request_mock.return_value = {"result": [{"key": "admin", "displayName": "Admin", "group": "core"}]}

        text = roles.list_project_roles({}, ctx).text

        assert "in project proj-default" in text
        assert "- admin: Admin (group: core)" in text
        assert request_mock.call_args.args[0] == "/management/v1/projects/proj-default/roles/_search"

    def test_create_project_role(self, ctx, request_mock):
        request_mock.return_value = {}

        text = roles.create_project_role({"projectId": "p1", "roleKey": "app:finance", "displayName": "Finance"}, ctx).text

        assert text == "Role created: app:finance (Finance) in project p1"
        request_mock.assert_called_once_with(
            "/management/v1/projects/p1/roles",
            method="POST",
            json={"roleKey": "app:finance", "displayName": "Finance"},
        )

    def test_grant_rejects_unknown_roles(self, ctx, request_mock):
        request_mock.return_value = {"result": [{"key": "admin"}]}

        result = roles.create_user_grant({"userId": "u1", "roleKeys": ["admin", "nonexistent"]}, ctx)

        assert result.is_error
        assert "nonexistent" in result.text
        assert "not found" in result.text
        assert "Available roles: admin" in result.text
        assert request_mock.call_count == 1

    def test_grant_created(self, ctx, request_mock):
        request_mock.side_effect = [{"result": [{"key": "admin"}]}, {"userGrantId": "g1"}]

        text = roles.create_user_grant({"userId": "u1", "roleKeys": ["admin"], "projectId": "p1"}, ctx).text

        assert "Grant ID: g1" in text
        request_mock.assert_called_with(
            "/management/v1/users/u1/grants", method="POST", json={"projectId": "p1", "roleKeys": ["admin"]}
        )

    def test_grant_requires_project(self, config_factory):
        ctx = HandlerContext(client=MagicMock(), config=config_factory(project_id=None))

        with pytest.raises(ValidationError, match="projectId is required"):
            roles.create_user_grant({"userId": "u1", "roleKeys": ["admin"]}, ctx)

    def test_list_user_grants_filters_by_project(self, ctx, request_mock):
        request_mock.return_value = {
            "result": [{"id": "g1", "roleKeys": ["admin"], "state": "USER_GRANT_STATE_ACTIVE", "projectId": "p1"}]
        }

        text = roles.list_user_grants({"userId": "u1", "projectId": "p1"}, ctx).text

        assert "- Grant g1: [admin] (ACTIVE) Project: p1" in text
        queries = request_mock.call_args.kwargs["json"]["queries"]
        assert queries == [{"userIdQuery": {"userId": "u1"}}, {"projectIdQuery": {"projectId": "p1"}}]

    def test_list_user_grants_without_project(self, config_factory):
        ctx = HandlerContext(client=MagicMock(), config=config_factory(project_id=None))
        ctx.client.request.return_value = {}

        text = roles.list_user_grants({"userId": "u1"}, ctx).text

        assert text == "No grants found for user u1."
        assert ctx.client.request.call_args.kwargs["json"]["queries"] == [{"userIdQuery": {"userId": "u1"}}]

    def test_remove_user_grant(self, ctx, request_mock):
        request_mock.return_value = {}

        roles.remove_user_grant({"userId": "u1", "grantId": "g1"}, ctx)

        request_mock.assert_called_once_with("/management/v1/users/u1/grants/g1", method="DELETE")


class TestServiceAccountHandlers:
    def test_create_service_user(self, ctx, request_mock):
        request_mock.return_value = {"userId": "sa1"}

        text = service_accounts.create_service_user({"userName": "ci-bot", "name": "CI Bot"}, ctx).text

        assert "User ID: sa1" in text
        assert request_mock.call_args.kwargs["json"]["accessTokenType"] == "ACCESS_TOKEN_TYPE_BEARER"

    def test_create_service_user_key(self, ctx, request_mock):
        request_mock.return_value = {"keyId": "key-new", "keyDetails": '{"type":"serviceaccount","keyId":"key-new"}'}

        text = service_accounts.create_service_user_key({"userId": "sa1"}, ctx).text

        assert "Key ID: key-new" in text
        assert "cannot be retrieved again" in text
        request_mock.assert_called_once_with("/management/v1/users/sa1/keys", method="POST", json={"type": "KEY_TYPE_JSON"})

    def test_list_service_user_keys(self, ctx, request_mock):
        request_mock.return_value = {"result": [{"id": "k1", "type": "KEY_TYPE_JSON"}]}

        text = service_accounts.list_service_user_keys({"userId": "sa1"}, ctx).text

        assert "- Key k1: type=KEY_TYPE_JSON, expires=never, created=N/A" in text


class TestOrganizationHandlers:
    def test_get_org(self, ctx, request_mock):
        request_mock.return_value = {
            "org": {
                "id": "org-1",
                "name": "Test Org",
                "state": "ORG_STATE_ACTIVE",
                "primaryDomain": "test.zitadel.cloud",
            }
        }

        text = organizations.get_org({}, ctx).text

        assert "Organization: Test Org" in text
        assert "State: ACTIVE" in text
        assert "Primary Domain: test.zitadel.cloud" in text

    def test_list_orgs(self, ctx, request_mock):
        request_mock.return_value = {"result": [{"id": "o1", "name": "Acme", "state": "ORG_STATE_ACTIVE"}]}

        text = organizations.list_orgs({"limit": 5}, ctx).text

        assert "- Acme [ACTIVE] ID: o1" in text
        request_mock.assert_called_once_with(
            "/admin/v1/orgs/_search", method="POST", json={"query": {"offset": "0", "limit": 5}}
        )


class TestUtilityHandlers:
    def test_get_auth_config(self, ctx, request_mock):
        request_mock.return_value = {"name": "My App", "oidcConfig": {"clientId": "client-abc"}}

        text = utility.get_auth_config({"projectId": "p1", "appId": "a1"}, ctx).text

        assert "AUTH_ZITADEL_ISSUER=https://test.zitadel.cloud" in text
        assert "AUTH_ZITADEL_CLIENT_ID=client-abc" in text
        assert "ZITADEL_PROJECT_ID=p1" in text
        assert "ZITADEL_ORG_ID=org-1" in text
        assert "ZITADEL_APP_ID=a1" in text
