from fastapi import FastAPI
from mangum import Mangum

from sfetch import SFetch
from dotenv import load_dotenv


load_dotenv()

sfetch = SFetch()
app = FastAPI()


sfetch.to_fastapi(app)


handler = Mangum(app)
