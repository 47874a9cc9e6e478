from fastapi import Request


# every request that needs DB will get a fresh session, and it will always close.
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
