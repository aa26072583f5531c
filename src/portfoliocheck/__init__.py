"""portfoliocheck package"""
