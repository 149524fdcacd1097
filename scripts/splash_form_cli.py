#!/usr/bin/env python3
"""Interactive terminal runner for the Ameren Illinois splash form.

Walks the same steps as the web form and posts partial, final and
disqualified leads to a running API.

Usage:
    python scripts/splash_form_cli.py --base-url http://localhost:8000

    # Keep the local session cache somewhere else:
    python scripts/splash_form_cli.py --cache-dir /tmp/solarlead

Requires:
    DATABASE_URL in the environment or .env (settings are loaded on import)
"""

import argparse
import asyncio
from pathlib import Path

from app.qualification.cache import DEFAULT_CACHE_DIR, LocalSessionCache
from app.qualification.client import LeadGateway, SplashFormDriver
from app.qualification.steps import InputKind, TOTAL_STEPS, step_for_index


def prompt_step(driver: SplashFormDriver) -> None:
    index = driver.state.current_step
    step = step_for_index(index)
    print(f"\nStep {index + 1} of {TOTAL_STEPS}")

    if step is None:
        print("By continuing you agree to be contacted by phone, email and text about solar.")
        tcpa = input("  Consent to be contacted? [y/N] ").strip().lower() == "y"
        sms = input("  Consent to text messages? [y/N] ").strip().lower() == "y"
        driver.set_consent(tcpa_consent=tcpa, sms_consent=sms)
        return

    print(step.label)
    if step.kind == InputKind.SELECT:
        for value, label in step.options:
            print(f"  {value:10} {label}")
    elif step.kind == InputKind.SLIDER:
        s = step.slider
        print(f"  {s.format_value(s.min)} to {s.format_value(s.max)}, steps of {s.step}")
    value = input(f"  [{step.placeholder}] > ").strip()
    driver.set_value(value)


async def run(base_url: str, cache_dir: Path) -> None:
    driver = SplashFormDriver(LeadGateway(base_url=base_url), cache=LocalSessionCache(cache_dir))
    print(f"Session {driver.state.session_id}")
    try:
        while True:
            prompt_step(driver)
            outcome = await driver.next()
            for field, message in outcome.errors.items():
                print(f"  ! {field}: {message}")
            if outcome.destination:
                print(f"\nDone: {base_url.rstrip('/')}{outcome.destination}")
                break
    except (KeyboardInterrupt, EOFError):
        print("\nLeaving the form")
        driver.handle_unload()
    finally:
        await driver.drain()


def main():
    parser = argparse.ArgumentParser(description="Fill in the splash lead form from a terminal")
    parser.add_argument("--base-url", default="http://localhost:8000", help="API base URL")
    parser.add_argument("--cache-dir", type=Path, default=DEFAULT_CACHE_DIR, help="Local session cache directory")
    args = parser.parse_args()
    asyncio.run(run(args.base_url, args.cache_dir))


if __name__ == "__main__":
    main()
