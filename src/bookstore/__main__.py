from bookstore.main import run

run()
