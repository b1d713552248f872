#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List, Optional

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from screener_app.config.loader import ConfigLoader
from screener_app.config.validation import ConfigValidator, ValidationError
from screener_app.errors import ConfigurationError


def validate_ticker_config(loader: ConfigLoader, ticker: Optional[str]) -> List[ValidationError]:
    """Validate the merged configuration for one ticker (or the global one)."""
    config = loader.merge_config(ticker)
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    loader = ConfigLoader.create(config_dir)
    print(f"🔍 Validating {loader.config_dir / 'screener.yaml'}...")

    tickers = sorted((loader.load_file_config().get("tickers") or {}).keys())
    all_valid = True

    for ticker in [None] + tickers:
        label = ticker or "global"
        print(f"\n📊 Validating {label}...")

        errors = validate_ticker_config(loader, ticker)
        if errors:
            print(f"❌ Found {len(errors)} validation errors:")
            for error in errors:
                print(f"  • {error.field}: {error.message} (value: {error.value})")
            all_valid = False
            continue

        try:
            config = loader.load_config(ticker=ticker)
        except ConfigurationError as e:
            print(f"❌ {e}")
            all_valid = False
            continue

        print(f"✅ {label} configuration is valid "
              f"(rule set: {config.evaluation.rule_set}, "
              f"lookback: {list(config.acquisition.lookback_days)} days)")

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
