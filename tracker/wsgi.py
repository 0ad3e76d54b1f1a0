from mangum import Mangum

from tracker.main import app

# ASGI handler for serverless deployment (the cron endpoint is hit by the platform scheduler)
handler = Mangum(app, lifespan="off")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
