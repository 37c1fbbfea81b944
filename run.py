"""Development server entry point."""
import uvicorn
from dotenv import load_dotenv, find_dotenv

env_path = find_dotenv()
if env_path:
    load_dotenv(env_path, override=False)

if __name__ == "__main__":
    uvicorn.run("church_attendance.main:app", host="0.0.0.0", port=8000, reload=True)
