#!/usr/bin/env python3
"""
Run a full TubeFlow session from the command line.

Generates every stage in order, approves each one automatically, picks the
first thumbnail concept and writes the asset package to a directory.
Requires GEMINI_API_KEY (or GOOGLE_API_KEY / API_KEY) in the environment.

Usage:
    python scripts/run_workflow.py "urban gardening" --niche "DIY & Home" --date 2026-11-02
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from producer.workflow import WorkflowController
from studio.context import RunContext
from studio.models import VoiceCustomization, WorkflowStage


def parse_args():
    parser = argparse.ArgumentParser(description="Run the TubeFlow workflow end to end")
    parser.add_argument("topic", help="Free-text video topic")
    parser.add_argument("--niche", required=True, help="Channel niche, e.g. 'Tech Reviews'")
    parser.add_argument("--date", required=True, help="Publish date, e.g. 2026-11-02")
    parser.add_argument("--time", default="12:00", help="Publish time (default: 12:00)")
    parser.add_argument("--tone", default="Engaging and Energetic")
    parser.add_argument("--length", default="8-10 minutes")
    parser.add_argument("--voice", default="Kore")
    parser.add_argument("--accent", default="Neutral")
    parser.add_argument("--prompts", type=int, default=5, help="Number of visual prompts")
    parser.add_argument("--output", default="tubeflow-output", help="Output directory")
    return parser.parse_args()


async def main():
    args = parse_args()
    controller = WorkflowController(RunContext())

    print("=" * 60)
    print("TUBEFLOW WORKFLOW")
    print("=" * 60)
    print()

    print("1. Generating idea...")
    state = await controller.run_idea(args.topic)
    print(f"✓ {state.idea.generated_title}")
    controller.approve()
    print()

    print("2. Writing script...")
    controller.update_inputs(
        WorkflowStage.SCRIPT_WRITING,
        niche=args.niche,
        tone=args.tone,
        length=args.length,
    )
    state = await controller.run_script()
    print(f"✓ {len(state.script.generated_script.split())} words")
    controller.approve()
    print()

    print("3. Generating voiceover...")
    state = await controller.run_voiceover(
        voice=args.voice,
        customization=VoiceCustomization(accent=args.accent),
    )
    print(f"✓ Voice: {state.voice.selected_voice}")
    controller.approve()
    print()

    print("4. Writing visual prompts...")
    state = await controller.run_prompts(count=args.prompts)
    print(f"✓ {len(state.prompts.generated_prompts)} prompts")
    controller.approve()
    print()

    print("5. Optimizing SEO...")
    state = await controller.run_seo()
    print(f"✓ {state.seo.optimized_title}")
    controller.approve()
    print()

    print("6. Designing thumbnail concepts...")
    state = await controller.run_thumbnail_concepts()
    for i, concept in enumerate(state.thumbnails.generated_concepts):
        print(f"  [{i}] {concept.headline}")
    controller.select_concept(0)
    controller.approve()
    print()

    print("7. Rendering thumbnails...")
    state = await controller.run_thumbnail_images()
    if not state.thumbnail_images.generated_images:
        print("⚠ No thumbnail could be generated; stopping here.")
        return
    print(f"✓ {len(state.thumbnail_images.generated_images)} variation(s)")
    controller.approve()
    print()

    print("8. Planning launch...")
    state = await controller.run_schedule(publish_date=args.date, publish_time=args.time)
    print(f"✓ {len(state.plan.generated_schedule)} checklist items")
    controller.approve()
    print()

    written = controller.export_package(args.output)

    print("=" * 60)
    print("✓ Workflow complete!")
    print()
    for path in written:
        print(f"  {path}")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
