import httpx
import pytest

from smart_menu.catalog.config import CatalogConfig
from smart_menu.catalog.gateway import MealDBGateway
from smart_menu.errors import CatalogError

BASE_URL = "https://mealdb.test/api/json/v1/1"

LOOKUP_PAYLOAD = {
    "meals": [{
        "idMeal": "52772",
        "strMeal": "Teriyaki Chicken Casserole",
        "strCategory": "Chicken",
        "strArea": "Japanese",
        "strInstructions": "Preheat oven to 350F. Bake for 35 minutes.",
        "strMealThumb": "https://mealdb.test/images/52772.jpg",
        "strIngredient1": "soy sauce",
        "strMeasure1": "3/4 cup",
        "strIngredient2": "",
        "strMeasure2": "",
        "strIngredient3": "chicken breasts",
        "strMeasure3": "2",
        "strIngredient4": None,
        "strMeasure4": None,
    }]
}


def _gateway(handler) -> MealDBGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return MealDBGateway(config=CatalogConfig(base_url=BASE_URL), client=client)


@pytest.mark.asyncio
async def test_list_by_category():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/json/v1/1/filter.php"
        assert request.url.params["c"] == "Seafood"
        return httpx.Response(200, json={"meals": [
            {"idMeal": "1", "strMeal": "Fish pie", "strMealThumb": "x.jpg"},
            {"idMeal": "", "strMeal": "No id"},
            {"idMeal": "2", "strMeal": "Kedgeree"},
        ]})

    async with _gateway(handler) as gateway:
        stubs = await gateway.list_by_category("Seafood")

    assert [s.id for s in stubs] == ["1", "2"]
    assert stubs[0].name == "Fish pie"


@pytest.mark.asyncio
async def test_list_by_cuisine_with_null_meals():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["a"] == "Kenyan"
        return httpx.Response(200, json={"meals": None})

    async with _gateway(handler) as gateway:
        assert await gateway.list_by_cuisine("Kenyan") == []


@pytest.mark.asyncio
async def test_get_details_builds_record():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/lookup.php")
        assert request.url.params["i"] == "52772"
        return httpx.Response(200, json=LOOKUP_PAYLOAD)

    async with _gateway(handler) as gateway:
        dish = await gateway.get_details("52772")

    assert dish.id == "52772"
    assert dish.area == "Japanese"
    assert [i.name for i in dish.ingredients] == ["soy sauce", "chicken breasts"]
    assert dish.ingredients[0].measure == "3/4 cup"


@pytest.mark.asyncio
async def test_get_details_missing():
    async with _gateway(lambda request: httpx.Response(200, json={"meals": None})) as gateway:
        assert await gateway.get_details("0") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(503, text="unavailable"),
    httpx.Response(200, text="<html>not json</html>"),
    httpx.Response(200, json=["unexpected", "list"]),
])
async def test_bad_responses_raise_catalog_error(response):
    async with _gateway(lambda request: response) as gateway:
        with pytest.raises(CatalogError):
            await gateway.list_by_category("Beef")


@pytest.mark.asyncio
async def test_transport_error_raises_catalog_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _gateway(handler) as gateway:
        with pytest.raises(CatalogError):
            await gateway.get_details("1")


@pytest.mark.asyncio
async def test_listing_is_capped_per_key():
    meals = [{"idMeal": str(i), "strMeal": f"Dish {i}"} for i in range(40)]
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"meals": meals})),
        base_url=BASE_URL,
    )
    gateway = MealDBGateway(config=CatalogConfig(base_url=BASE_URL, max_dishes_per_key=10), client=client)

    stubs = await gateway.list_by_category("Beef")
    await gateway.aclose()

    assert [s.id for s in stubs] == [str(i) for i in range(10)]


@pytest.mark.asyncio
async def test_context_manager_closes_client():
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"meals": None})),
        base_url=BASE_URL,
    )

    async with MealDBGateway(config=CatalogConfig(base_url=BASE_URL), client=client) as gateway:
        assert await gateway.get_details("1") is None
        assert not client.is_closed

    assert client.is_closed
