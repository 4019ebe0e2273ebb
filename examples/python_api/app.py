from __future__ import annotations

import argparse
from pathlib import Path

from sonarqube_provisioner.config import load, reconciler_from_config, validate


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Create every declared sonarqube-provisioner resource via the Python API"
    )
    parser.add_argument(
        "--config", default="sonarqube-provisioner.yaml", help="Path to config file"
    )
    parser.add_argument("--apply", action="store_true", help="Create the declared resources")
    args = parser.parse_args()

    config = load(Path(args.config))
    validate(config)
    print(f"{len(config.resources)} declarations are valid")

    if not args.apply:
        return

    reconciler = reconciler_from_config(config)
    for resource in config.resources:
        inst = reconciler.create(resource)
        print(f"- created {inst.address:45} id={inst.id}")


if __name__ == "__main__":
    main()
