from __future__ import annotations

import logging
import os
import random
import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError, jwt
from passlib.context import CryptContext
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, create_engine, text
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import Session, relationship, sessionmaker

from .notifications import CrisisAlert, CrisisNotifier
from .quote_engine import SEED_QUOTES, Quote, RandomSource, select_quote
from .sentiment_engine import InvalidInputError, Mood, QuoteTag, classify, quote_tag_for
from .weekly_engine import aggregate_week, collect_observations_for_window, utc_today

APP_VERSION = "1.0.0"
REPO_ROOT = Path(__file__).resolve().parents[3]
load_dotenv(REPO_ROOT / ".env")

logging.basicConfig(
    level=os.getenv("DAILYJOURNAL_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def resolve_db_path() -> str:
    db_env = (os.getenv("DAILYJOURNAL_DB_PATH") or os.getenv("DB_PATH") or "").strip()
    db_path = Path(db_env) if db_env else (REPO_ROOT / "dailyjournal.db")
    if not db_path.is_absolute():
        db_path = REPO_ROOT / db_path
    return str(db_path)


DB_PATH = resolve_db_path()
DATABASE_URL = f"sqlite:///{DB_PATH}"
SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    trusted_email = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    journal_entries = relationship("JournalEntry", back_populates="user")


class QuoteRecord(Base):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    quote_text = Column(Text, nullable=False)
    author = Column(String(255), nullable=True)
    mood_tag = Column(String(50), index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_quote(self) -> Quote:
        return Quote(id=self.id, text=self.quote_text, author=self.author, tag=QuoteTag(self.mood_tag))


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    detected_mood = Column(String(50), nullable=False)
    quote_id = Column(Integer, ForeignKey("quotes.id"), nullable=True)
    is_quote_revealed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)

    user = relationship("User", back_populates="journal_entries")
    quote = relationship("QuoteRecord")


def validate_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email address")
    return value


class TokenResponse(BaseModel):
    access_token: str
    token_type: str
    id: int
    email: str
    trusted_email: str


class UserResponse(BaseModel):
    id: int
    email: str
    trusted_email: str


class SignupRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)
    trusted_email: str

    @field_validator("email", "trusted_email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return validate_email(value)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8)


class UpdateTrustedEmailRequest(BaseModel):
    trusted_email: str

    @field_validator("trusted_email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return validate_email(value)


class JournalCreate(BaseModel):
    content: str


class QuoteResponse(BaseModel):
    id: int
    text: str
    author: Optional[str] = None
    tag: str


class JournalResponse(BaseModel):
    id: int
    user_id: int
    content: str
    detected_mood: str
    is_crisis: bool
    quote_id: Optional[int] = None
    is_quote_revealed: bool
    created_at: datetime
    quote: Optional[QuoteResponse] = None


class WeeklyMoodPoint(BaseModel):
    date: str
    mood: str
    entries: int


class MessageResponse(BaseModel):
    message: str


app = FastAPI(title="Daily Journal API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


@app.on_event("startup")
def on_startup() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seeded = seed_quotes(db)
        if seeded:
            logger.info("Seeded %d quotes into %s", seeded, DB_PATH)
    finally:
        db.close()


def seed_quotes(db: Session) -> int:
    if db.query(QuoteRecord.id).first() is not None:
        return 0
    for item in SEED_QUOTES:
        db.add(QuoteRecord(quote_text=item["text"], author=item["author"], mood_tag=item["tag"]))
    db.commit()
    return len(SEED_QUOTES)


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


_quote_rng = random.Random()
_crisis_notifier: Optional[CrisisNotifier] = None


def get_quote_rng() -> RandomSource:
    return _quote_rng


def get_notifier() -> CrisisNotifier:
    global _crisis_notifier
    if _crisis_notifier is None:
        _crisis_notifier = CrisisNotifier()
    return _crisis_notifier


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    if len(password.encode("utf-8")) > 72:
        raise HTTPException(
            status_code=400,
            detail="Password too long (bcrypt limit is 72 bytes). Use a shorter password.",
        )
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        user_id = int(user_id)
    except (JWTError, ValueError) as exc:
        raise credentials_exception from exc

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise credentials_exception
    return user


def get_user_by_email(email: str, db: Session) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def get_quotes_by_tag(tag: QuoteTag, db: Session) -> List[Quote]:
    records = db.query(QuoteRecord).filter(QuoteRecord.mood_tag == QuoteTag(tag).value).all()
    return [record.to_quote() for record in records]


def get_entries_in_range(user_id: int, start: datetime, end: datetime, db: Session) -> List[JournalEntry]:
    """Entries with ``start <= created_at < end``, newest first."""
    return (
        db.query(JournalEntry)
        .filter(
            JournalEntry.user_id == user_id,
            JournalEntry.created_at >= start,
            JournalEntry.created_at < end,
        )
        .order_by(JournalEntry.created_at.desc())
        .all()
    )


def get_entry_for_user(entry_id: int, user_id: int, db: Session) -> JournalEntry:
    entry = db.query(JournalEntry).filter(JournalEntry.id == entry_id).first()
    if entry is None or entry.user_id != user_id:
        raise HTTPException(status_code=404, detail="Entry not found")
    return entry


def build_user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, email=user.email, trusted_email=user.trusted_email)


def build_token_response(user: User) -> TokenResponse:
    token = create_access_token({"sub": str(user.id), "email": user.email})
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        id=user.id,
        email=user.email,
        trusted_email=user.trusted_email,
    )


def build_journal_response(entry: JournalEntry) -> JournalResponse:
    quote = None
    if entry.quote is not None:
        quote = QuoteResponse(
            id=entry.quote.id,
            text=entry.quote.quote_text,
            author=entry.quote.author,
            tag=entry.quote.mood_tag,
        )
    return JournalResponse(
        id=entry.id,
        user_id=entry.user_id,
        content=entry.content,
        detected_mood=entry.detected_mood,
        is_crisis=entry.detected_mood == Mood.CRISIS.value,
        quote_id=entry.quote_id,
        is_quote_revealed=bool(entry.is_quote_revealed),
        created_at=entry.created_at,
        quote=quote,
    )


@app.get("/health")
def health() -> dict:
    db_status = "ok"
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database health check failed")
        db_status = "error"
    return {
        "status": "ok",
        "version": APP_VERSION,
        "db": db_status,
    }


@app.post("/auth/signup", response_model=TokenResponse)
def signup(payload: SignupRequest, db: Session = Depends(get_db)) -> TokenResponse:
    if get_user_by_email(payload.email, db):
        raise HTTPException(status_code=409, detail="User already exists")
    user = User(
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
        trusted_email=payload.trusted_email,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return build_token_response(user)


@app.post("/auth/login", response_model=TokenResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
) -> TokenResponse:
    user = get_user_by_email(form_data.username, db)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Invalid email or password")
    return build_token_response(user)


@app.post("/auth/logout", response_model=MessageResponse)
def logout(user: User = Depends(get_current_user)) -> MessageResponse:
    return MessageResponse(message="Logged out successfully")


@app.get("/auth/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)) -> UserResponse:
    return build_user_response(user)


@app.post("/journal/entries", response_model=JournalResponse)
def create_journal_entry(
    payload: JournalCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    rng: RandomSource = Depends(get_quote_rng),
    notifier: CrisisNotifier = Depends(get_notifier),
) -> JournalResponse:
    try:
        result = classify(payload.content)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    quote = select_quote(get_quotes_by_tag(quote_tag_for(result.mood), db), rng)
    now = datetime.utcnow()
    entry = JournalEntry(
        user_id=user.id,
        content=payload.content,
        detected_mood=result.mood.value,
        quote_id=quote.id if quote else None,
        is_quote_revealed=False,
        created_at=now,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)

    if result.is_crisis:
        logger.warning("Crisis language detected in entry %d for user %d", entry.id, user.id)
        background_tasks.add_task(
            notifier.send_crisis_alert,
            CrisisAlert(
                user_email=user.email,
                trusted_email=user.trusted_email,
                entry_text=entry.content,
                timestamp=now,
            ),
        )
    return build_journal_response(entry)


@app.get("/journal/entries", response_model=List[JournalResponse])
def list_journal_entries(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> List[JournalResponse]:
    entries = (
        db.query(JournalEntry)
        .filter(JournalEntry.user_id == user.id)
        .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        .all()
    )
    return [build_journal_response(entry) for entry in entries]


@app.get("/journal/entries/{entry_id}", response_model=JournalResponse)
def get_journal_entry(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> JournalResponse:
    return build_journal_response(get_entry_for_user(entry_id, user.id, db))


@app.post("/journal/entries/{entry_id}/reveal-quote", response_model=MessageResponse)
def reveal_quote(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> MessageResponse:
    entry = get_entry_for_user(entry_id, user.id, db)
    entry.is_quote_revealed = True
    db.commit()
    return MessageResponse(message="Quote revealed")


@app.get("/mood/weekly", response_model=List[WeeklyMoodPoint])
def weekly_mood(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> List[WeeklyMoodPoint]:
    reference_day = utc_today()
    observations = collect_observations_for_window(user.id, reference_day, db)
    return [WeeklyMoodPoint(**point.to_dict()) for point in aggregate_week(observations, reference_day)]


@app.post("/profile/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> MessageResponse:
    if not verify_password(payload.current_password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    user.hashed_password = get_password_hash(payload.new_password)
    user.updated_at = datetime.utcnow()
    db.commit()
    return MessageResponse(message="Password updated successfully")


@app.post("/profile/update-trusted-email", response_model=MessageResponse)
def update_trusted_email(
    payload: UpdateTrustedEmailRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> MessageResponse:
    user.trusted_email = payload.trusted_email
    user.updated_at = datetime.utcnow()
    db.commit()
    return MessageResponse(message="Trusted email updated successfully")
