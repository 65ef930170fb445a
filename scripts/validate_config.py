#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from vault_app.config.loader import ConfigLoader
from vault_app.config.validation import ConfigFieldError, ConfigValidator
from vault_app.gas.policy import GasPolicyResolver
from vault_app.models.transactions import Network, OperationKind


def validate_network_config(network: str) -> list[ConfigFieldError]:
    """Validate merged configuration for a specific network."""
    loader = ConfigLoader.create()
    config = loader.merge_config(network)
    return ConfigValidator.validate_config(config)


def print_gas_table(network: str) -> None:
    """Print the gas profile every operation resolves to on a network."""
    config = ConfigLoader.create().load(network)
    resolver = GasPolicyResolver(config.gas, config.network)

    print(f"  {'operation':<16}{'units':>8}{'price':>8}{'expiry':>8}")
    for operation in OperationKind:
        resolution = resolver.resolve(operation, network)
        profile = resolution.profile
        flag = "  (substituted)" if resolution.substituted else ""
        print(
            f"  {operation.value:<16}{profile.max_execution_units:>8}"
            f"{profile.unit_price:>8}{profile.expiration_offset_seconds:>7}s{flag}"
        )


def main():
    """Main validation function."""
    print("🔍 Validating vault app configuration...")

    all_valid = True

    for network in [n.value for n in Network] + ["unknown-network"]:
        print(f"\n📊 Validating {network}...")

        try:
            errors = validate_network_config(network)

            if errors:
                print(f"❌ Found {len(errors)} validation errors:")
                for error in errors:
                    print(f"  • {error.field}: {error.message} (value: {error.value})")
                all_valid = False
            else:
                print(f"✅ {network} configuration is valid")

            print_gas_table(network)

        except Exception as e:
            print(f"❌ Error validating {network}: {e}")
            all_valid = False

    # Explicit overrides take precedence over networks.yaml
    print("\n📋 Testing explicit overrides...")
    overrides = {"gas": {"profiles": {"vault_operations": {"max_execution_units": 500}}}}
    errors = ConfigValidator.validate_config(ConfigLoader.create().merge_config("testnet", overrides))
    if errors:
        print(f"✅ Override below the floor detected ({len(errors)} error(s)), resolver will substitute")
    else:
        print("❌ Override below the floor was not detected")
        all_valid = False

    if all_valid:
        print("\n🎉 All configurations are valid!")
        return 0

    print("\n💥 Configuration validation failed!")
    return 1


if __name__ == "__main__":
    sys.exit(main())
