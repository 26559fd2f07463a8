#!/usr/bin/env python3
"""
Example Event Generation

This script demonstrates how to use the nuclear_events package to
generate charged-current electron neutrino events on argon-40.

Usage:
    python run_generator.py [--events N] [--seed SEED] [--source SOURCE]

Example:
    python run_generator.py --events 100 --source dar --output events.json
"""

import argparse
import json
import logging
import sys
import os

# Add parent directory to path for importing nuclear_events
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nuclear_events.config import GeneratorConfig, create_generator
from nuclear_events.constants import ELECTRON_NEUTRINO
from nuclear_events.presets import ARGON_40, make_argon_structure_database
from nuclear_events.reaction import ProcessType, create_reactions
from nuclear_events.source import DecayAtRestSource, FermiDiracSource, MonoenergeticSource
from nuclear_events.target import Target
from nuclear_events.utils import mev2_to_cm2, particle_symbol


def build_source(name: str, energy: float):
    if name == "dar":
        return DecayAtRestSource(ELECTRON_NEUTRINO)
    if name == "supernova":
        return FermiDiracSource(ELECTRON_NEUTRINO, temperature=3.5, E_max=60.0)
    return MonoenergeticSource(ELECTRON_NEUTRINO, energy)


def build_generator(config: GeneratorConfig, source_name: str, energy: float):
    """
    Assemble a generator for nu_e CC scattering on 40Ar.

    Args:
        config: Generator settings
        source_name: 'mono', 'dar' or 'supernova'
        energy: Neutrino energy for the monoenergetic source [MeV]
    """
    structure_db, matrix_elements = make_argon_structure_database()
    reactions = create_reactions(
        ProcessType.NEUTRINO_CC,
        ARGON_40,
        matrix_elements,
        mass_table=structure_db.mass_table,
        coulomb_mode=config.coulomb,
    )
    return create_generator(
        config,
        source=build_source(source_name, energy),
        target=Target.single(ARGON_40),
        reactions=reactions,
        structure_db=structure_db,
    )


def run_events(generator, num_events: int):
    """Generate events and print a short summary of each."""
    print("\n" + "="*70)
    print("       NEUTRINO EVENT GENERATION")
    print("       nu_e + 40Ar --> e- + 40K*")
    print("="*70)

    print(f"\nSeed: {generator.seed}")
    xs = generator.flux_averaged_total_xs()
    if xs > 0.0:
        print(f"Flux-averaged total cross section: {mev2_to_cm2(xs):.4e} cm^2")

    events = []
    for i in range(num_events):
        event = generator.create_event()
        events.append(event)
        products = ", ".join(
            particle_symbol(p.pdg) for p in event.final_particles
        )
        print(
            f"  {i:>5d}  Ex = {event.excitation_energy:7.4f} MeV  "
            f"Ee = {event.ejectile.total_energy:8.4f} MeV  [{products}]"
        )
    return events


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Neutrino-nucleus event generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # 10 events at 30 MeV
  %(prog)s --events 100 --source dar
  %(prog)s --config settings.json --output events.json
        """
    )

    parser.add_argument(
        "--events",
        type=int,
        default=10,
        help="Number of events to generate (default: 10)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random number seed (default: from system entropy)"
    )
    parser.add_argument(
        "--source",
        choices=["mono", "dar", "supernova"],
        default="mono",
        help="Neutrino source (default: mono)"
    )
    parser.add_argument(
        "--energy",
        type=float,
        default=30.0,
        help="Energy of the monoenergetic source in MeV (default: 30)"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="JSON file with generator settings"
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Output JSON file path"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.events < 0:
        print(f"Error: Number of events must be non-negative, got {args.events}")
        sys.exit(1)

    settings = {}
    if args.config:
        with open(args.config) as f:
            settings = json.load(f)
    if args.seed is not None:
        settings["seed"] = args.seed

    try:
        config = GeneratorConfig.from_dict(settings)
        generator = build_generator(config, args.source, args.energy)
        events = run_events(generator, args.events)

        if args.output:
            with open(args.output, "w") as f:
                json.dump(
                    {
                        "seed": generator.seed,
                        "state": generator.get_state_string(),
                        "events": [event.to_dict() for event in events],
                    },
                    f,
                    indent=2,
                )
            print(f"\nEvents exported to: {args.output}")

    except Exception as e:
        print(f"\nError during event generation: {e}")
        raise


if __name__ == "__main__":
    main()
