"""Simple entrypoint to inspect the local wardrobe inventory."""

from wardrobe_app.app import SmartWardrobeApp


def main() -> None:
    app = SmartWardrobeApp()
    snapshot = app.load()
    for section in snapshot.sections:
        count = snapshot.item_count(section.name)
        print(f"{section.name}: {section.describe_count(count)}")
    print(f"{len(snapshot.items)} item(s) in total")


if __name__ == "__main__":
    main()
