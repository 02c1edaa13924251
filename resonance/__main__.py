import uvicorn

from resonance.core.config import HOST, PORT


def main() -> None:
    uvicorn.run("resonance.main:app", host=HOST, port=PORT)


if __name__ == "__main__":
    main()
