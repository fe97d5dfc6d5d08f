import argparse
import random
from pathlib import Path

from phonedraw.db.engine import create_schema, get_sessionmaker, make_engine
from phonedraw.ingest import participants_to_csv, prizes_to_csv
from phonedraw.models import DrawSettings
from phonedraw.samples import build_default_prizes, generate_sample_participants
from phonedraw.workflows import configure_seed


def main() -> None:
    """Write sample CSVs and store a development seed."""
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("--out", type=Path, default=Path("sample_data"))
    parser.add_argument("--count", type=int, default=5000)
    parser.add_argument("--seed", type=int, default=7)
    args = parser.parse_args()

    args.out.mkdir(parents=True, exist_ok=True)
    # Sample numbers only need to be stable between runs of this script.
    participants = generate_sample_participants(args.count, random.Random(args.seed))
    (args.out / "participants.csv").write_text(participants_to_csv(participants), encoding="utf-8")
    (args.out / "prizes.csv").write_text(prizes_to_csv(build_default_prizes()), encoding="utf-8")

    engine = make_engine()
    create_schema(engine)
    Session = get_sessionmaker(engine)
    with Session.begin() as session:
        DrawSettings.load(session)
        configure_seed(session, args.seed)

    print(f"Wrote {len(participants)} participants and prizes to {args.out}; seed {args.seed}")


if __name__ == "__main__":
    main()
