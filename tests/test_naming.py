from __future__ import annotations

from pathlib import Path
import sys


def _load():
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root / "src"))
    from ctorgen import naming

    return naming


def test_to_snake_handles_acronyms() -> None:
    naming = _load()
    assert naming.to_snake("User") == "user"
    assert naming.to_snake("HTTPClient") == "http_client"
    assert naming.to_snake("userID") == "user_id"
    assert naming.to_snake("ShippingAddress") == "shipping_address"


def test_parameter_name_strips_private_prefix_and_escapes_keywords() -> None:
    naming = _load()
    assert naming.parameter_name("_secret") == "secret"
    assert naming.parameter_name("__token") == "token"
    assert naming.parameter_name("class") == "class_"
    assert naming.parameter_name("self") == "self_"
    assert naming.parameter_name("name") == "name"
    assert naming.parameter_name("Node", reserved=("Node", "NodeBuilder")) == "Node_"
    assert naming.parameter_name("node", reserved=("Node", "NodeBuilder")) == "node"


def test_generated_names_follow_type_name() -> None:
    naming = _load()
    assert naming.constructor_name("UserProfile") == "new_user_profile"
    assert naming.builder_class_name("UserProfile") == "UserProfileBuilder"
    assert naming.builder_entry_name("UserProfile") == "new_user_profile_builder"
    assert naming.setter_name("age") == "with_age"
    assert naming.output_file_name("UserProfile") == "user_profile_gen.py"
    assert naming.output_file_name("UserProfile", "_ctor") == "user_profile_ctor.py"
