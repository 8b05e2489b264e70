import asyncio
import logging
import random
import sqld_driver

url = "http://localhost:8080"

async def main():
    async with sqld_driver.HttpDriver(url, timeout=10) as driver:
        await driver.transaction([
            """
            CREATE TABLE IF NOT EXISTS book (
                id INTEGER PRIMARY KEY,
                title TEXT NOT NULL,
                author TEXT NOT NULL
            )
            """,
        ])

        author = sample_name(AUTHOR_NAME_PARTS)
        book_count = random.randint(1, 3)
        inserts = [
            f"INSERT INTO book (title, author) VALUES ({quote(sample_name(BOOK_TITLE_PARTS))}, {quote(author)})"
            for _ in range(book_count)
        ]
        result_sets = await driver.transaction(inserts + [
            "SELECT id, title, author FROM book ORDER BY id ASC",
        ])

        for stmt, result_set in zip(inserts, result_sets):
            if not result_set.success:
                print(f"{stmt!r} failed: {result_set.error}")

        for row in result_sets[-1].rows:
            print(row)

AUTHOR_NAME_PARTS = [
    ["Daniel", "Jane", "Mark", "William", "Milan", "Kazuo", "Sally", "Mieko", "Kim"],
    ["Defoe", "Austen", "Twain", "Golding", "Kundera", "Ishiguro", "Rooney", "Kawakami", "Hye-Jin"],
]

BOOK_TITLE_PARTS = [
    [
        "Robinson", "Pride", "Sense", "Huckleberry", "Tom", "Lord",
        "Život", "Klara", "Normal", "Breasts", "Concerning",
    ],
    [
        "Crusoe", "and Prejudice", "and Sensibility", "Finn", "Sawyer", "of the Flies",
        "je jinde", "and The Sun", "People", "and Eggs", "My Daughter",
    ],
]

def sample_name(name_parts):
    return " ".join([
        random.choice(parts)
        for parts in name_parts
    ])

def quote(text):
    return "'" + text.replace("'", "''") + "'"

logging.basicConfig(level=logging.DEBUG)
asyncio.run(main())
