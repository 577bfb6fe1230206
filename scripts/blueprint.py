"""
Token Minter - Contract Blueprint

CIP-57 blueprint describing the minting policy: its parameter and redeemer
schemas, the compiled template program and its hash. Derived entirely from
the ValidatorTemplate; no runtime state is involved.
"""

import json
from typing import Any, Dict

BLUEPRINT_TITLE = "Minting Policy"
BLUEPRINT_DESCRIPTION = "Admin-controlled minting policy for a single token name"
BLUEPRINT_VERSION = "1.0.0"
BLUEPRINT_LICENSE = "Apache-2.0"

DEFINITIONS: Dict[str, Any] = {
    "ByteArray": {"title": "ByteArray", "dataType": "bytes"},
    "Unit": {
        "title": "Unit",
        "anyOf": [{"dataType": "constructor", "index": 0, "fields": []}],
    },
    "MintingConfig": {
        "title": "MintingConfig",
        "anyOf": [
            {
                "title": "MintingConfig",
                "dataType": "constructor",
                "index": 0,
                "fields": [
                    {"title": "admin_pub_key_hash", "$ref": "#/definitions/ByteArray"},
                    {"title": "token_name", "$ref": "#/definitions/ByteArray"},
                ],
            }
        ],
    },
}


def build_blueprint(template) -> Dict[str, Any]:
    """
    Build the CIP-57 blueprint for a compiled template.

    Args:
        template: ValidatorTemplate (``cbor``, ``script_hash`` and ``compiler_version``)

    Returns:
        Blueprint as a JSON-serializable dictionary
    """
    compiler_name, _, compiler_version = template.compiler_version.partition(" ")
    return {
        "preamble": {
            "title": BLUEPRINT_TITLE,
            "description": BLUEPRINT_DESCRIPTION,
            "version": BLUEPRINT_VERSION,
            "plutusVersion": "v3",
            "compiler": {"name": compiler_name, "version": compiler_version},
            "license": BLUEPRINT_LICENSE,
        },
        "validators": [
            {
                "title": BLUEPRINT_TITLE,
                "description": BLUEPRINT_DESCRIPTION,
                "redeemer": {"title": "redeemer", "schema": {"$ref": "#/definitions/Unit"}},
                "parameters": [
                    {"title": "config", "schema": {"$ref": "#/definitions/MintingConfig"}}
                ],
                "compiledCode": template.cbor.hex(),
                "hash": template.script_hash.hex(),
            }
        ],
        "definitions": DEFINITIONS,
    }


def blueprint_json(template, indent: int = 2) -> str:
    return json.dumps(build_blueprint(template), indent=indent)
