import boto3
import logging
from functools import lru_cache

from charity_ledger.core.config import settings
from charity_ledger.data_access.charity_repository import CharityRepository
from charity_ledger.data_access.donation_repository import DonationRepository
from charity_ledger.data_access.dynamodb import DynamoRecordStore
from charity_ledger.data_access.store import InMemoryRecordStore, OrderedRecordStore
from charity_ledger.models.charity import Charity, NameClaim
from charity_ledger.models.donation import Donation
from charity_ledger.services.donation_service import DonationService
from charity_ledger.services.operations import CharityOperations

logger = logging.getLogger(__name__)


@lru_cache()
def get_boto_session() -> boto3.Session:
    return boto3.Session(
        region_name=settings.AWS_REGION,
        profile_name=settings.AWS_PROFILE
    )

@lru_cache()
def get_dynamo_table():
    session = get_boto_session()
    dynamo_resource = session.resource('dynamodb')
    return dynamo_resource.Table(settings.DYNAMODB_TABLE_NAME)

def build_store(collection: str, model) -> OrderedRecordStore:
    if settings.STORAGE_BACKEND == "dynamodb":
        logger.info(f"Using DynamoDB table {settings.DYNAMODB_TABLE_NAME} for {collection}")
        return DynamoRecordStore(table=get_dynamo_table(), collection=collection, model=model)
    return InMemoryRecordStore(name=collection)

@lru_cache()
def get_charity_repository() -> CharityRepository:
    return CharityRepository(
        store=build_store(settings.CHARITIES_COLLECTION, Charity),
        names=build_store(settings.CHARITY_NAMES_COLLECTION, NameClaim)
    )

@lru_cache()
def get_donation_repository() -> DonationRepository:
    return DonationRepository(store=build_store(settings.DONATIONS_COLLECTION, Donation))

@lru_cache()
def get_donation_service() -> DonationService:
    return DonationService(
        charities=get_charity_repository(),
        donations=get_donation_repository()
    )

@lru_cache()
def get_charity_operations() -> CharityOperations:
    return CharityOperations(
        charities=get_charity_repository(),
        donation_service=get_donation_service()
    )
