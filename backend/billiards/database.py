from databases import Database

from billiards.config import config

database = Database(config.pg_dsn)
