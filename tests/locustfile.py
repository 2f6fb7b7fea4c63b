from locust import HttpUser, task, between

class APIPerformanceTest(HttpUser):
    wait_time = between(1, 3)

    @task
    def test_search_stocks(self):
        self.client.get("/stocks/search", params={"q": "apple", "exchange": "US"})

    @task
    def test_stock_quote(self):
        self.client.get("/stocks/quote/MSFT", name="/stocks/quote/[symbol]")

    @task
    def test_saved_stocks(self):
        self.client.get("/stocks")
