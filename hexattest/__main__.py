# hexattest/__main__.py
import uvicorn

from hexattest.settings import settings

if __name__ == "__main__":
    uvicorn.run("hexattest.main:app", host=settings.HOST, port=settings.PORT)
