"""
Tests for the HTTP minting endpoint.
"""

import pytest
from unittest.mock import Mock
from fastapi.testclient import TestClient

from api.app import create_app
from conftest import TOKEN_NAME
from network.exceptions import SubmissionRejected, SubmissionUnreachable
from txbuilder.exceptions import InvalidMintRequest, NoSpendableInputs

TX_ID = "ab" * 32


@pytest.fixture
def mock_service():
    service = Mock()
    service.submit_minting_tx.return_value = TX_ID
    service.submit_burning_tx.return_value = TX_ID
    service.policy_info.return_value = {"policy_id": "00" * 28, "network": "emulator"}
    return service


@pytest.fixture
def mock_client(mock_service):
    return TestClient(create_app(mock_service))


class TestRoutes:
    """Test request handling against a service double."""

    def test_mint(self, mock_client, mock_service):
        resp = mock_client.put("/mint", params={"amount": 1000})

        assert resp.status_code == 200
        assert resp.text == TX_ID
        assert resp.headers["content-type"].startswith("text/plain")
        mock_service.submit_minting_tx.assert_called_once_with(1000)

    def test_burn(self, mock_client, mock_service):
        resp = mock_client.put("/burn", params={"amount": 10})

        assert resp.status_code == 200
        assert resp.text == TX_ID
        mock_service.submit_burning_tx.assert_called_once_with(10)

    def test_policy(self, mock_client):
        resp = mock_client.get("/policy")

        assert resp.status_code == 200
        assert resp.json()["network"] == "emulator"

    def test_missing_amount(self, mock_client, mock_service):
        resp = mock_client.put("/mint")

        assert resp.status_code == 400
        assert "amount" in resp.text
        mock_service.submit_minting_tx.assert_not_called()

    def test_non_integer_amount(self, mock_client):
        resp = mock_client.put("/mint", params={"amount": "lots"})

        assert resp.status_code == 400

    def test_get_not_allowed(self, mock_client):
        assert mock_client.get("/mint", params={"amount": 1}).status_code == 405


class TestErrors:
    """Test that build and submission failures answer 400 with the message."""

    @pytest.mark.parametrize("error", [
        InvalidMintRequest(0, "Quantity must be non-zero"),
        NoSpendableInputs("addr_test1example"),
        SubmissionRejected("BadInputsUTxO", TX_ID),
        SubmissionUnreachable("connection refused"),
    ])
    def test_failure_is_400(self, mock_client, mock_service, error):
        mock_service.submit_minting_tx.side_effect = error

        resp = mock_client.put("/mint", params={"amount": 1})

        assert resp.status_code == 400
        assert resp.text == str(error)


class TestEmulatorBackedApi:
    """Run requests through a real service on the in-memory ledger."""

    @pytest.fixture
    def client(self, service):
        return TestClient(create_app(service))

    def test_mint_then_burn(self, client, funded_emulator, admin_wallet, policy_script):
        minted = client.put("/mint", params={"amount": 1000})
        burned = client.put("/burn", params={"amount": 400})

        assert minted.status_code == 200
        assert burned.status_code == 200
        assert funded_emulator.is_submitted(minted.text)
        assert funded_emulator.is_submitted(burned.text)
        holdings = funded_emulator.balance_of(admin_wallet.address)
        assert holdings.quantity_of(policy_script.policy_id, TOKEN_NAME) == 600

    def test_zero_amount(self, client):
        resp = client.put("/mint", params={"amount": 0})

        assert resp.status_code == 400
        assert "non-zero" in resp.text

    def test_burn_without_holdings(self, client):
        resp = client.put("/burn", params={"amount": 5})

        assert resp.status_code == 400
        assert "Insufficient funds" in resp.text

    def test_policy_info(self, client, policy_script, admin_wallet):
        data = client.get("/policy").json()

        assert data["policy_id"] == policy_script.policy_id_hex
        assert data["address"] == admin_wallet.address
        assert data["network"] == "emulator"
