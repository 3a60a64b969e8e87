"""
Vercel Serverless Function Handler for the portfolio upload API
"""
from portfolio_upload.main import app

# Vercel's Python runtime serves the exported ASGI app
handler = app

# For local development
if __name__ == '__main__':
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
