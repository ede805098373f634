from billiards.database import database


async def sql_get_settings() -> dict[str, str]:
    result = await database.fetch_all("SELECT key, value FROM app_settings")
    return {str(x._mapping["key"]): str(x._mapping["value"]) for x in result}


async def sql_upsert_setting(key: str, value: str) -> None:
    query = """
        INSERT INTO app_settings (key, value, updated)
        VALUES (:key, :value, NOW())
        ON CONFLICT (key) DO UPDATE
        SET value = EXCLUDED.value, updated = EXCLUDED.updated
        """
    await database.execute(query=query, values={"key": key, "value": value})


async def sql_delete_setting(key: str) -> None:
    await database.execute("DELETE FROM app_settings WHERE key = :key", values={"key": key})
