"""LLM SEO Analyzer

Simple CLI for analyzing a single page.
"""

import argparse
import asyncio
import json
import sys

from seoanalyzer.agents.orchestrator import AnalysisOrchestrator
from seoanalyzer.models.events import EventType


async def run_analysis(url: str, as_json: bool = False) -> int:
    """Analyze the given URL, printing progress as it happens."""
    print(f"Analyzing: {url}")
    print("-" * 50)

    orchestrator = AnalysisOrchestrator()
    exit_code = 0

    async for event in orchestrator.analyze(url):
        data = event.data

        if event.event == EventType.STAGE_STARTED:
            print(f"\n[~] {event.message}")

        elif event.event == EventType.ATTEMPT_STARTED:
            if data.get("attempt_index", 0) > 0:
                print(f"  [!] {event.message}")

        elif event.event == EventType.RUN_COMPLETED:
            print(f"  [+] {event.message} (score {data.get('score')})")

        elif event.event == EventType.ANALYSIS_COMPLETE:
            result = data.get("result", {})
            if as_json:
                print(json.dumps(result, indent=2))
                continue
            print(f"\n\n[*] Analysis Complete!")
            print(f"   Runtime: {data.get('runtime_ms')}ms")
            print(f"\n{'='*50}")
            print(f"LLM-FRIENDLINESS SCORE: {result.get('score')}/10")
            print(f"{'='*50}")
            print(result.get("summary", ""))
            for section in result.get("analysis", []):
                print(f"\n## {section.get('title', '')}")
                print(section.get("description", ""))
                print("Your Action Plan:")
                for i, step in enumerate(section.get("actionableSteps", []), 1):
                    print(f"  Step {i}: {step}")

        elif event.event == EventType.ERROR:
            print(f"\n[!] Error ({data.get('category')}): {event.message}")
            exit_code = 1

    return exit_code


def main():
    parser = argparse.ArgumentParser(description="LLM SEO Analyzer")
    parser.add_argument("--url", "-u", required=True, help="Page to analyze (http or https)")
    parser.add_argument("--json", action="store_true", help="Print the final report as JSON")

    args = parser.parse_args()

    sys.exit(asyncio.run(run_analysis(args.url, args.json)))


if __name__ == "__main__":
    main()
