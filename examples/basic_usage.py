#!/usr/bin/env python3
"""
Basic Usage Example - Alert Screener

This script screens a handful of simulated price alerts against synthetic
historical bars. It shows how to:
- Load bars into an in-memory provider
- Initialize the screening engine with publishers
- Screen a batch of alerts
- Inspect verdicts and running statistics

Run: python examples/basic_usage.py
"""

from datetime import datetime, timedelta, timezone
from typing import List

from screener_app.acquisition.providers import InMemoryBarProvider
from screener_app.data.models import Bar
from screener_app.delivery import MemoryPublisher, StdoutPublisher
from screener_app.engine import AlertScreeningEngine
from screener_app.logging.config import configure_logging

SESSION_OPEN = datetime(2024, 3, 7, 13, 30, tzinfo=timezone.utc)
NOW = datetime(2024, 3, 7, 20, 5, tzinfo=timezone.utc)


def session_bars(start_price: float, step: float, minutes: int, days: int = 3) -> List[Bar]:
    """Bars covering the regular session on consecutive days, trending by ``step`` per bar."""
    bars = []
    price = start_price
    for day in range(days):
        open_ts = SESSION_OPEN - timedelta(days=days - 1 - day)
        for i in range(390 // minutes):
            bars.append(Bar(
                ts=open_ts + timedelta(minutes=i * minutes),
                open=price,
                high=price + abs(step) + 0.05,
                low=price - abs(step) - 0.05,
                close=price + step,
                volume=10000.0,
            ))
            price += step
    return bars


def build_provider() -> InMemoryBarProvider:
    """An uptrending, a downtrending and a thin ticker."""
    provider = InMemoryBarProvider()

    provider.add_bars("NVDA", 1, session_bars(800.0, 0.02, minutes=1))
    provider.add_bars("NVDA", 5, session_bars(800.0, 0.1, minutes=5, days=12))

    provider.add_bars("INTC", 1, session_bars(45.0, -0.005, minutes=1))
    provider.add_bars("INTC", 5, session_bars(45.0, -0.02, minutes=5, days=12))

    # Only 40 one-minute bars, never enough for a 200-period EMA
    provider.add_bars("THIN", 1, session_bars(3.0, 0.001, minutes=1, days=1)[:40])
    provider.add_bars("THIN", 5, session_bars(3.0, 0.005, minutes=5, days=1))
    return provider


def print_verdict(screened) -> None:
    """Print one screened alert."""
    verdict = screened.verdict
    marker = "✅" if verdict.all_passed else "❌"
    print(f"{marker} {screened.ticker}: {verdict.score} conditions met at ${verdict.price:.2f}")
    for failed in verdict.failed_details:
        print(f"    • {failed.name}: expected {failed.expected}, actual {failed.actual}")


def main():
    """Main demo function."""
    configure_logging(level="WARNING")

    print("🚀 Alert Screener - Basic Usage Demo")
    print("=" * 60)

    print("1. Initializing the screening engine...")
    memory = MemoryPublisher()
    engine = AlertScreeningEngine(
        build_provider(),
        publishers=[memory, StdoutPublisher(format="pretty")],
        now_fn=lambda: NOW,
    )
    print(f"   Rule set: {engine.config.evaluation.rule_set} ({len(engine.rule_set)} rules)")
    print()

    print("2. Screening alerts...")
    alerts = [
        {"ticker": "NVDA", "close": 878.5, "changePercent": 3.2, "alert_type": "new_high"},
        {"ticker": "INTC", "close": 41.1, "changePercent": -1.4, "alert_type": "volume_spike"},
        {"ticker": "THIN", "close": 3.05},
        {"ticker": "NOPE", "close": 12.0},
    ]
    report = engine.process_alerts(alerts)
    print()

    print("3. Verdicts:")
    for screened in report.valid + report.filtered:
        print_verdict(screened)
    for skipped in report.skipped:
        print(f"⏭️  {skipped.ticker}: skipped ({skipped.reason})")
    print()

    print("4. Running statistics:")
    stats = engine.get_statistics()
    print(f"   Evaluations: {stats['totalEvaluations']}, pass rate {stats['passRate']}%")
    for entry in engine.get_top_failing_conditions(limit=3):
        print(f"   {entry['name']}: failed {entry['failed']}/{entry['total']} ({entry['failureRate']}%)")
    print()

    print(f"5. Messages captured by the memory publisher: {len(memory.messages)}")
    print("\n✨ Demo completed!")


if __name__ == "__main__":
    main()
