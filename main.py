"""Simple entrypoint to serve the WeatherWear API locally."""

import os

import uvicorn


def main() -> None:
    uvicorn.run("server.api:app", host="0.0.0.0", port=int(os.getenv("PORT", "8080")), reload=False)


if __name__ == "__main__":
    main()
