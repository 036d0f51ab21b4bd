#!/usr/bin/env python3
"""
Pet Shelter Tracker - Command Line

Lists, adds, edits and removes pets in the shelter database.

Usage:
  python shelter.py list                     # Show all pets
  python shelter.py show 3                   # Show one pet
  python shelter.py add --name Rex --gender male --weight 12
  python shelter.py update 3 --weight 9      # Change only the weight
  python shelter.py delete 3                 # Remove one pet
  python shelter.py delete-all               # Remove every pet
  python shelter.py dummy                    # Insert a demonstration pet
"""
import sys
import logging
import argparse
from typing import List, Optional

import router
from config import DB_PATH, LOG_LEVEL, LOG_FORMAT
from dal import DAL
from errors import PetStoreError
from schema import Gender, Pet


GENDER_ICONS = {
  Gender.MALE: "♂",
  Gender.FEMALE: "♀",
  Gender.UNKNOWN: "?",
}


def format_pet(pet: Pet) -> str:
  """One-line summary of a pet"""
  icon = GENDER_ICONS.get(pet.gender, "?")
  breed = pet.breed or "Unknown breed"
  return f"  {icon} [{pet.id}] {pet.name} - {breed}, {pet.weight} lbs ({Gender(pet.gender).label})"


def parse_gender(value: str) -> Gender:
  try:
    return Gender.from_label(value)
  except ValueError as e:
    raise argparse.ArgumentTypeError(str(e))


def collect_fields(args) -> dict:
  """Field set from the options the user actually gave"""
  fields = {}
  if args.name is not None:
    fields["name"] = args.name
  if args.breed is not None:
    fields["breed"] = args.breed
  if args.gender is not None:
    fields["gender"] = int(args.gender)
  if args.weight is not None:
    fields["weight"] = args.weight
  return fields


def show_list(dal: DAL):
  pets = dal.list_pets()

  print("\n" + "=" * 60)
  print(f"🐾 PETS IN THE SHELTER ({len(pets)} total)")
  print("=" * 60)

  if not pets:
    print("  No pets found")
    return

  for pet in pets:
    print(format_pet(pet))


def show_pet(dal: DAL, pet_id: int) -> int:
  pet = dal.get(router.item_uri(pet_id))
  if pet is None:
    print(f"❓ No pet with id {pet_id}")
    return 1
  print(format_pet(pet))
  return 0


def add_pet(dal: DAL, args) -> int:
  pet_id = dal.insert(router.COLLECTION_URI, collect_fields(args))
  print(f"✅ Pet saved with id {pet_id}")
  return 0


def update_pet(dal: DAL, args) -> int:
  rows = dal.update(router.item_uri(args.id), collect_fields(args))
  if rows == 0:
    print(f"⚠️ No changes saved for pet {args.id}")
    return 1
  print(f"✅ Pet {args.id} updated")
  return 0


def delete_pet(dal: DAL, pet_id: int) -> int:
  rows = dal.delete(router.item_uri(pet_id))
  if rows == 0:
    print(f"❓ No pet with id {pet_id}")
    return 1
  print(f"🗑️ Pet {pet_id} deleted")
  return 0


def add_field_options(parser: argparse.ArgumentParser, name_required: bool):
  parser.add_argument("--name", type=str, required=name_required, help="Pet name")
  parser.add_argument("--breed", type=str, help="Breed")
  parser.add_argument("--gender", type=parse_gender, help="male, female or unknown")
  parser.add_argument("--weight", type=int, help="Weight in lbs")


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(description="Pet Shelter Tracker")
  parser.add_argument("--db", type=str, default=DB_PATH, help="Database file")
  parser.add_argument("--log-level", type=str, default=LOG_LEVEL, help="Logging level")

  commands = parser.add_subparsers(dest="command", required=True)

  commands.add_parser("list", help="Show all pets")

  show = commands.add_parser("show", help="Show one pet")
  show.add_argument("id", type=int)

  add = commands.add_parser("add", help="Add a pet")
  add_field_options(add, name_required=True)

  update = commands.add_parser("update", help="Change fields of a pet")
  update.add_argument("id", type=int)
  add_field_options(update, name_required=False)

  delete = commands.add_parser("delete", help="Delete one pet")
  delete.add_argument("id", type=int)

  commands.add_parser("delete-all", help="Delete every pet")
  commands.add_parser("dummy", help="Insert dummy data")

  return parser


def run(dal: DAL, args) -> int:
  if args.command == "list":
    show_list(dal)
    return 0
  elif args.command == "show":
    return show_pet(dal, args.id)
  elif args.command == "add":
    return add_pet(dal, args)
  elif args.command == "update":
    return update_pet(dal, args)
  elif args.command == "delete":
    return delete_pet(dal, args.id)
  elif args.command == "delete-all":
    rows = dal.delete_all()
    print(f"🗑️ Deleted {rows} pet(s)")
    return 0
  elif args.command == "dummy":
    pet_id = dal.insert_dummy_pet()
    print(f"🆕 Dummy pet inserted with id {pet_id}")
    return 0
  return 2


def main(argv: Optional[List[str]] = None) -> int:
  args = build_parser().parse_args(argv)
  logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)

  dal = DAL(args.db)
  try:
    dal.init_database()
    return run(dal, args)
  except PetStoreError as e:
    print(f"❌ {e}")
    return 1
  finally:
    dal.close()


if __name__ == "__main__":
  sys.exit(main())
