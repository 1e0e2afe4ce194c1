# Collection Migrations
#
# Migrations are plain Python modules with upgrade(dao) and downgrade(dao)
# functions. They run only once listed in migrations.registry.MIGRATIONS.
#
# Usage:
#   python -m migrations.runner migrate
#   python -m migrations.runner status
#   python -m migrations.runner rollback
