"""
Tests for CLI configuration loading and the minter commands.
"""

import json

import pytest
from unittest.mock import patch
from click.testing import CliRunner

from cli.config import (
    ENV_VARS,
    YACI_MNEMONIC,
    ConfigurationError,
    MinterConfig,
    load_config,
    load_environment,
)
from cli.context import EMULATOR_COLLATERAL_LOVELACE, AppContext
from cli.main import cli
from conftest import TEMPLATE_PREFIX
from network.emulator import EmulatorProvider
from network.blockfrost import BlockfrostProvider

ADMIN_HEX = "aa" * 28


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_file(tmp_path):
    def write(data):
        path = tmp_path / "minter.json"
        path.write_text(json.dumps(data))
        return str(path)
    return write


class TestMinterConfig:
    """Test model validation."""

    def test_defaults(self):
        config = MinterConfig()

        assert config.network == "emulator"
        assert config.token_name == "CO2 Tonne"
        assert config.port == 8088
        assert config.is_local

    def test_unknown_network(self):
        with pytest.raises(ValueError):
            MinterConfig(network="guildnet")

    def test_token_name_too_long(self):
        with pytest.raises(ValueError):
            MinterConfig(token_name="x" * 33)

    def test_admin_key_hash_normalized(self):
        assert MinterConfig(admin_key_hash="AA" * 28).admin_key_hash == ADMIN_HEX

    @pytest.mark.parametrize("value", ["zz" * 28, "aa" * 27])
    def test_admin_key_hash_invalid(self, value):
        with pytest.raises(ValueError):
            MinterConfig(admin_key_hash=value)

    @pytest.mark.parametrize("value", ["cd" * 32, "cd" * 32 + "#x", "abc#0"])
    def test_collateral_invalid(self, value):
        with pytest.raises(ValueError):
            MinterConfig(collateral=value)

    def test_collateral_valid(self):
        assert MinterConfig(collateral="cd" * 32 + "#1").collateral == "cd" * 32 + "#1"

    def test_wallet_mnemonic(self):
        assert MinterConfig(network="yaci").wallet_mnemonic() == YACI_MNEMONIC
        assert MinterConfig(network="emulator").wallet_mnemonic() is None
        assert MinterConfig(network="preprod", mnemonic="words").wallet_mnemonic() == "words"

    def test_public_network_needs_mnemonic(self):
        with pytest.raises(ConfigurationError, match="MNEMONIC"):
            MinterConfig(network="preprod").wallet_mnemonic()

    def test_secrets_masked(self):
        data = MinterConfig(blockfrost_api_key="secret", mnemonic="words").to_dict()

        assert data["blockfrost_api_key"] == "***"
        assert data["mnemonic"] == "***"
        assert data["network"] == "emulator"


class TestLoadConfig:
    """Test source precedence and error reporting."""

    def test_environment(self):
        environ = {"MINTER_NETWORK": "preview", "BLOCKFROST_API_KEY": "key", "MINTER_PORT": "9000", "MNEMONIC": ""}

        assert load_environment(environ) == {"network": "preview", "blockfrost_api_key": "key", "port": "9000"}

    def test_precedence(self, config_file):
        path = config_file({"network": "preview", "token_name": "From File", "port": 7000})
        environ = {"MINTER_TOKEN_NAME": "From Env", "MINTER_PORT": "7100"}

        config = load_config(path, {"port": 7200, "host": None}, environ)

        assert config.network == "preview"
        assert config.token_name == "From Env"
        assert config.port == 7200
        assert config.host == "127.0.0.1"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(str(tmp_path / "missing.json"), environ={})

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_config(str(path), environ={})

    def test_non_object(self, config_file):
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_config(config_file([1, 2]), environ={})

    def test_invalid_value(self):
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(environ={"MINTER_PORT": "not-a-port"})


class TestAppContext:
    """Test component wiring."""

    def test_emulator_wiring(self, fake_template):
        app = AppContext(MinterConfig(emulator_funds=50_000_000))
        app._template = fake_template

        assert isinstance(app.provider, EmulatorProvider)
        coins = sorted(u.value.coin for u in app.provider.find_utxos(app.wallet.address))
        assert coins == [EMULATOR_COLLATERAL_LOVELACE, 50_000_000]
        assert app.script.config.admin_identity == app.wallet.pub_key_hash
        assert app.service.builder.wallet is app.wallet

    def test_admin_override(self, fake_template):
        app = AppContext(MinterConfig(admin_key_hash=ADMIN_HEX))
        app._template = fake_template

        assert app.policy_config.admin_identity == bytes.fromhex(ADMIN_HEX)

    def test_script_file(self, tmp_path):
        path = tmp_path / "policy.plutus"
        path.write_text(TEMPLATE_PREFIX.hex())

        app = AppContext(MinterConfig(script_file=str(path)))

        assert app.script.program == TEMPLATE_PREFIX

    def test_collateral_ref(self):
        app = AppContext(MinterConfig(collateral="cd" * 32 + "#2"))

        assert app.collateral_ref.index == 2
        assert app.collateral_ref.tx_id == "cd" * 32

    def test_yaci_provider(self):
        app = AppContext(MinterConfig(network="yaci"))

        assert isinstance(app.provider, BlockfrostProvider)
        assert app.provider.config.base_url == "http://localhost:8080/api/v1"

    def test_blockfrost_without_key(self):
        app = AppContext(MinterConfig(network="preprod", mnemonic=YACI_MNEMONIC))

        with pytest.raises(ConfigurationError, match="project id"):
            app.provider

    def test_invalid_mnemonic(self):
        app = AppContext(MinterConfig(network="preprod", mnemonic="not a mnemonic"))

        with pytest.raises(ConfigurationError, match="Cannot load wallet"):
            app.wallet


class TestCommands:
    """Run the click commands against the emulator."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def script_config(self, tmp_path, config_file):
        path = tmp_path / "policy.plutus"
        path.write_text(TEMPLATE_PREFIX.hex())
        return config_file({"network": "emulator", "script_file": str(path)})

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_mint(self, runner, script_config):
        result = runner.invoke(cli, ["-c", script_config, "-o", "json", "mint", "--amount", "100"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["action"] == "mint"
        assert len(data["tx_id"]) == 64

    def test_burn_without_holdings(self, runner, script_config):
        result = runner.invoke(cli, ["-c", script_config, "burn", "--amount", "5"])

        assert result.exit_code == 1
        assert "Insufficient funds" in result.output

    def test_zero_amount(self, runner, script_config):
        result = runner.invoke(cli, ["-c", script_config, "mint", "--amount", "0"])

        assert result.exit_code == 1
        assert "non-zero" in result.output

    def test_info(self, runner, script_config):
        result = runner.invoke(cli, ["-c", script_config, "-o", "json", "info", "--show-config"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["holdings"] == 0
        assert data["network"] == "emulator"
        assert data["config"]["script_file"].endswith("policy.plutus")

    def test_info_on_default_network(self, runner):
        """The default emulator network compiles the bundled policy when no script file is set."""
        result = runner.invoke(cli, ["-o", "json", "info"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["network"] == "emulator"
        assert len(data["policy_id"]) == 56
        assert data["holdings"] == 0

    def test_blueprint(self, runner, fake_template, tmp_path):
        output = tmp_path / "plutus.json"

        with patch("cli.context.ValidatorTemplate.compile", return_value=fake_template):
            result = runner.invoke(cli, ["blueprint", "--output", str(output)])

        assert result.exit_code == 0, result.output
        blueprint = json.loads(output.read_text())
        assert blueprint["validators"][0]["compiledCode"] == TEMPLATE_PREFIX.hex()

    def test_bad_network_option(self, runner):
        result = runner.invoke(cli, ["--network", "guildnet", "info"])

        assert result.exit_code == 2

    def test_missing_mnemonic(self, runner, script_config):
        args = ["-c", script_config, "--network", "preprod", "info"]
        result = runner.invoke(cli, args, env={"BLOCKFROST_API_KEY": "preprodKEY"})

        assert result.exit_code == 1
        assert "MNEMONIC" in result.output
